"""Command-line interface for protoreflect."""
