"""IELTS Writing Task 2 sentence trainer backend."""
