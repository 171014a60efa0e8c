# SPDX-License-Identifier: MIT
"""Interface modules describing diagstream collaborators.

Import the specific interface modules (e.g. ``diagstream.interfaces.diagnostics``)
directly; this package re-exports nothing.
"""

__all__: tuple[str, ...] = ()
