"""
Command-line interface for labsweep.

Built with Click, with a hierarchical command structure.

Examples
--------
Acquiring a trace from a simulated analyzer that cannot report its point count:
```bash
$ labsweep trace --mock --no-query-points
```

Listing available VISA devices:
```bash
$ labsweep visa
```

CLI Tree
--------

```
$ labsweep --tree
cli
└── trace
└── visa
```
"""

from .base import cli

__all__ = ["cli"]
