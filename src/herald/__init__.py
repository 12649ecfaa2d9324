"""herald - adaptive output for wrapped build, test and lint commands.

herald runs a child process, classifies each line it prints, and renders a
live status line followed by a summary sized to how noisy the output was.
"""

from __future__ import annotations

__version__ = "0.1.0"
