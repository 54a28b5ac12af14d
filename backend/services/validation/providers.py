"""Provider update rules"""

from typing import Any, Dict, List, Optional

from services.validation.base import Failure, dig, field_failure, has_path, is_blank, rule_violation

TOKEN_MAX_LENGTH = 500

TOKEN_NOT_ALLOWED = "Provider does not allow token"


def allows_token(provider: Optional[Dict[str, Any]]) -> bool:
    token = (provider or {}).get("providerToken")
    if not token:
        return False
    return token.get("factName") is not None or token.get("prompt") is not None


def validate_provider_update(incoming: Dict[str, Any], current: Optional[Dict[str, Any]] = None) -> List[Failure]:
    """
    An omitted token value is a no-op and an empty string clears the token.
    Any other value needs a provider whose token config has a prompt or fact name.
    """
    failures: List[Failure] = []

    if has_path(incoming, "providerToken.value"):
        value = dig(incoming, "providerToken.value")
        if value is not None:
            if not isinstance(value, str):
                failures.append(field_failure("providerToken.value", "must be a string"))
            elif len(value) > TOKEN_MAX_LENGTH:
                failures.append(field_failure(
                    "providerToken.value", f"is too long (maximum is {TOKEN_MAX_LENGTH} characters)"
                ))
            if value != "" and not allows_token(current):
                failures.append(rule_violation(TOKEN_NOT_ALLOWED, field="providerToken.value"))

    if has_path(incoming, "proxy.id") and is_blank(dig(incoming, "proxy.id")):
        failures.append(field_failure("proxy.id", "can't be blank"))
    return failures
