"""Encoders and decoders for sketch payloads and Intake diagnostics."""
