"""Artifact resolution and content-addressed cache for agent skills."""
