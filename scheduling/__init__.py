"""Pure booking rules: slot sequences, conflicts, lifecycle, pricing and reports."""
