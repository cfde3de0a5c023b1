"""Operator CLI for the git smart HTTP bridge."""
