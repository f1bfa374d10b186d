"""NiceGUI pages for acmeauth.

Import this module to register all page routes with NiceGUI.
"""

from acmeauth.pages import auth, index

__all__ = ["auth", "index"]

# Touch modules to prevent linter from removing "unused" imports.
# These imports register @ui.page decorators as a side effect.
_PAGES = (auth, index)
