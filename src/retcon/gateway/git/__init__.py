"""Git gateway: the only place retcon runs git.

Architecture:
- Git: Abstract aggregate exposing one sub-gateway per concern
- RealGit: Production implementation using subprocess
- FakeGit: In-memory implementation backed by a FakeRepository for tests
"""
