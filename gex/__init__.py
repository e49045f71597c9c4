"""gex - Switch between multiple Git identities and their SSH keys."""

from gex.profile import Profile, ProfileStore
from gex.results import Scope
from gex.switcher import ProfileSwitcher

__version__ = "0.1.0"

__all__ = ["Profile", "ProfileStore", "ProfileSwitcher", "Scope", "__version__"]
