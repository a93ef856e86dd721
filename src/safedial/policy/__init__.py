"""Dial policy: data model, defaults, evaluation and YAML loading."""
