"""HTTP API for the school payroll engine."""
