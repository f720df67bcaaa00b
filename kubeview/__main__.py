"""Entry point for `python -m kubeview`.

Usage:
    python -m kubeview
    KUBEVIEW_NAMESPACE_SCOPE=default python -m kubeview
"""

from __future__ import annotations

from kubeview.app import run

run()
