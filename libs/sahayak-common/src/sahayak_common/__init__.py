"""Shared building blocks for sahayak services: config, logging, errors, HTTP plumbing."""
