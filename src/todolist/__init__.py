"""todolist - a to-do list backed by a document store."""
