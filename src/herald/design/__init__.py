"""Output classification and adaptive rendering engine.

Submodules:
- ``models``: enums and value types
- ``task``: TaskState, the concurrency-safe record of one wrapped command
- ``recognition``: command intent detection and line classification
- ``cognitive``: cognitive load estimation
- ``progress``: the live spinner / status line
- ``render``: start, output, end and summary lines

Import from the submodules directly; ``herald.config`` depends on
``models`` so this package keeps no eager imports.
"""
