"""Language-model client adapter."""
