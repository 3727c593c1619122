"""Chant recognition core: normalization, fuzzy matching, sequence validation, counting."""
