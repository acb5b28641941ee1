"""Git commit operations sub-gateway.

This module provides the commit-level reads (HEAD, parents, log output) and
the single commit mutation the engine performs directly: amending HEAD.

Import from submodules:
- abc: GitCommitOps
- real: RealGitCommitOps
- fake: FakeGitCommitOps
"""
