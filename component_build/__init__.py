"""
Component build tooling

This package contains:
- config: default config tree, config schema, settings and command names
- core: config resolution, build descriptors, bundling orchestration, errors
- utils: concurrent task batches, glob matching, external command runner
- models: run options
"""

__version__ = "1.0.0"
