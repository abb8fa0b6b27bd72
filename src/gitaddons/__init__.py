"""Interactive helpers on top of git.

Features:
- Switch branches from an interactive list of local and remote branches
- Create local tracking branches for remote-only branches
- Rebase onto the remote default branch after switching
- Preview the commands before they run
- View commit history for an author over a time range
"""

__version__ = "0.1.0"
