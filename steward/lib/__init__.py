"""Shared configuration, types, validation, and file formats."""
