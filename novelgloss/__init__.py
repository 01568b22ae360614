"""Glossary-directed web novel translation service."""
