"""Configuration, logging, storage and identity helpers shared by all domains."""
