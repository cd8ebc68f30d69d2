"""defcards: a glossary of defined terms with spaced-repetition study."""

from defcards.consts import VERSION

__version__ = VERSION
