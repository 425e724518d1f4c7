"""Coach/student linking and trainer rewards."""
