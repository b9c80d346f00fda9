"""Octane query, defect, bug parameter and bug state services."""
