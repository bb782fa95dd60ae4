"""Self-quizzing trainer for multiple-choice question banks."""
