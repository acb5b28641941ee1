"""Git branch operations sub-gateway.

Import from submodules:
- abc: GitBranchOps
- real: RealGitBranchOps
- fake: FakeGitBranchOps
"""
