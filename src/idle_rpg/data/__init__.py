from .loader import Roster, load_roster, parse_roster

__all__ = ["Roster", "load_roster", "parse_roster"]
