"""Generate multiple-choice quizzes with a language model and export them."""
