"""Spaced-repetition scheduling for lesson review cards."""
