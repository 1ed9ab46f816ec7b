"""Configuration defaults, schema, settings and command vocabulary"""
