"""Core domain: validation, authentication, proofs and orchestration."""
