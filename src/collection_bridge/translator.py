"""Script translator: rewrites pre-request/test scripts between tool dialects.

Translation is pattern based: a fixed list of idiomatic accessor calls is
rewritten for each supported direction and everything else passes through
verbatim. Scripts may still require manual review after conversion.
"""

import logging
import re
from typing import Callable, Literal

logger = logging.getLogger(__name__)

Dialect = Literal["postman", "insomnia", "thunderclient"]

DIALECTS: tuple[str, ...] = ("postman", "insomnia", "thunderclient")

THUNDERCLIENT_WARNING = (
    "// Warning: Thunder Client has limited script support\n"
    "// Some features may not work\n"
)

# A quoted variable name: "token" or 'token'
_NAME = r"""['"]([^'"]+)['"]"""
# Value argument of a set() call, up to the closing parenthesis
_VALUE = r"\s*,\s*([^)]+)"

Rule = tuple[re.Pattern, str]


def _rules(*pairs: tuple[str, str]) -> list[Rule]:
    return [(re.compile(pattern), replacement) for pattern, replacement in pairs]


POSTMAN_TO_INSOMNIA = _rules(
    (r"\bpm\.response\.to\.have\.status\(\s*(\d+)\s*\)",
     r"insomnia.expect(insomnia.response.status).to.equal(\1)"),
    # Environment variables
    (rf"\bpm\.environment\.get\({_NAME}\)", r'insomnia.environment.get("\1")'),
    (rf"\bpm\.environment\.set\({_NAME}{_VALUE}\)", r'insomnia.environment.set("\1", \2)'),
    (rf"\bpm\.environment\.unset\({_NAME}\)", r'insomnia.environment.unset("\1")'),
    # Collection variables live in the base environment
    (rf"\bpm\.collectionVariables\.get\({_NAME}\)", r'insomnia.baseEnvironment.get("\1")'),
    (rf"\bpm\.collectionVariables\.set\({_NAME}{_VALUE}\)", r'insomnia.baseEnvironment.set("\1", \2)'),
    # Insomnia has no globals, fall back to local variables
    (rf"\bpm\.globals\.get\({_NAME}\)", r'insomnia.variables.get("\1")'),
    (rf"\bpm\.globals\.set\({_NAME}{_VALUE}\)", r'insomnia.variables.set("\1", \2)'),
    (rf"\bpm\.variables\.get\({_NAME}\)", r'insomnia.variables.get("\1")'),
    (rf"\bpm\.variables\.set\({_NAME}{_VALUE}\)", r'insomnia.variables.set("\1", \2)'),
    # Request
    (r"\bpm\.request\.(url|method|headers|body)\b", r"insomnia.request.\1"),
    # Response
    (r"\bpm\.response\.code\b", "insomnia.response.status"),
    (r"\bpm\.response\.status\b", "insomnia.response.statusText"),
    (r"\bpm\.response\.(json|text)\(\)", r"insomnia.response.\1()"),
    (r"\bpm\.response\.(headers|responseTime)\b", r"insomnia.response.\1"),
    # Tests
    (r"\bpm\.test\(", "insomnia.test("),
    (r"\bpm\.expect\(", "insomnia.expect("),
    (r"\bpm\.sendRequest\(", "insomnia.sendRequest("),
)

INSOMNIA_TO_POSTMAN = _rules(
    (rf"\binsomnia\.environment\.get\({_NAME}\)", r'pm.environment.get("\1")'),
    (rf"\binsomnia\.environment\.set\({_NAME}{_VALUE}\)", r'pm.environment.set("\1", \2)'),
    (rf"\binsomnia\.environment\.unset\({_NAME}\)", r'pm.environment.unset("\1")'),
    (rf"\binsomnia\.baseEnvironment\.get\({_NAME}\)", r'pm.collectionVariables.get("\1")'),
    (rf"\binsomnia\.baseEnvironment\.set\({_NAME}{_VALUE}\)", r'pm.collectionVariables.set("\1", \2)'),
    (rf"\binsomnia\.variables\.get\({_NAME}\)", r'pm.variables.get("\1")'),
    (rf"\binsomnia\.variables\.set\({_NAME}{_VALUE}\)", r'pm.variables.set("\1", \2)'),
    (r"\binsomnia\.request\.(url|method|headers|body)\b", r"pm.request.\1"),
    # statusText first; the word boundary keeps it out of the status rule
    (r"\binsomnia\.response\.statusText\b", "pm.response.status"),
    (r"\binsomnia\.response\.status\b", "pm.response.code"),
    (r"\binsomnia\.response\.(json|text)\(\)", r"pm.response.\1()"),
    (r"\binsomnia\.response\.(headers|responseTime)\b", r"pm.response.\1"),
    (r"\binsomnia\.test\(", "pm.test("),
    (r"\binsomnia\.expect\(", "pm.expect("),
    (r"\binsomnia\.sendRequest\(", "pm.sendRequest("),
)

POSTMAN_TO_THUNDERCLIENT = _rules(
    (r"\bpm\.response\.to\.have\.status\(\s*(\d+)\s*\)",
     r"tc.expect(tc.response.status).to.equal(\1)"),
    (rf"\bpm\.(?:environment|collectionVariables|globals|variables)\.get\({_NAME}\)",
     r'tc.getVar("\1")'),
    (rf"\bpm\.(?:environment|collectionVariables|globals|variables)\.set\({_NAME}{_VALUE}\)",
     r'tc.setVar("\1", \2)'),
    (r"\bpm\.test\(", "tc.test("),
    (r"\bpm\.expect\(", "tc.expect("),
    (r"\bpm\.response\.json\(\)", "tc.response.json"),
    (r"\bpm\.response\.text\(\)", "tc.response.text"),
    (r"\bpm\.response\.code\b", "tc.response.status"),
    (r"\bpm\.response\.responseTime\b", "tc.response.time"),
    (r"\bpm\.response\.headers\b", "tc.response.headers"),
)

_LEFTOVER_POSTMAN = re.compile(r"\bpm\.")


def _apply(rules: list[Rule], script: str) -> str:
    for pattern, replacement in rules:
        script = pattern.sub(replacement, script)
    return script


def postman_to_insomnia(script: str) -> str:
    """Rewrite Postman ``pm.*`` calls into Insomnia ``insomnia.*`` calls."""
    return _apply(POSTMAN_TO_INSOMNIA, script)


def insomnia_to_postman(script: str) -> str:
    """Rewrite Insomnia ``insomnia.*`` calls into Postman ``pm.*`` calls."""
    return _apply(INSOMNIA_TO_POSTMAN, script)


def postman_to_thunderclient(script: str) -> str:
    """Rewrite Postman test idioms into Thunder Client ``tc.*`` calls.

    Thunder Client only runs a small subset of the Postman API. When the
    script still uses something outside that subset after rewriting, a
    warning comment is prepended so the user knows to review it.
    """
    converted = _apply(POSTMAN_TO_THUNDERCLIENT, script)
    if "pm.sendRequest" in script or _LEFTOVER_POSTMAN.search(converted):
        converted = THUNDERCLIENT_WARNING + converted
    return converted


_ROUTES: dict[tuple[str, str], tuple[Callable[[str], str], ...]] = {
    ("postman", "insomnia"): (postman_to_insomnia,),
    ("insomnia", "postman"): (insomnia_to_postman,),
    ("postman", "thunderclient"): (postman_to_thunderclient,),
    ("insomnia", "thunderclient"): (insomnia_to_postman, postman_to_thunderclient),
}


def script_family(fmt: str) -> Dialect | None:
    """Return the scripting dialect of a collection or target format, if any."""
    if fmt in DIALECTS:
        return fmt  # type: ignore[return-value]
    return None


def translate(script: str, from_dialect: str | None, to_dialect: str | None) -> str:
    """Translate a script from one dialect to another.

    Same-dialect calls, unknown dialects and unsupported directions return
    the script unchanged.
    """
    if not script or from_dialect == to_dialect:
        return script
    route = _ROUTES.get((from_dialect, to_dialect))  # type: ignore[arg-type]
    if route is None:
        logger.debug("No script route %s -> %s, passing through", from_dialect, to_dialect)
        return script
    for step in route:
        script = step(script)
    return script


def to_internal(script: str | None, dialect: str) -> str | None:
    """Bring a parsed script into the unified model.

    Scripts are stored in their source dialect, so this only normalizes
    blank scripts to None.
    """
    if script is None or not script.strip():
        return None
    logger.debug("Keeping %d-char %s script in source dialect", len(script), dialect)
    return script
