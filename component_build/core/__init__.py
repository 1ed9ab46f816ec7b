"""
Core build functionality

- config_loader: Configuration merging, loading and required-field checks
- descriptors: Expansion of config + entry files into build descriptors
- bundler: Bundler collaborator (rollup)
- orchestrator: Concurrent bundling, artifact flattening, post-build steps
- manifest: Release package.json and dist files
- runner: Per-command project runner
- errors: Error variants
"""
