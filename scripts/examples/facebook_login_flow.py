"""Example: print a Facebook login URL, then complete the callback from a pasted code."""

from __future__ import annotations

import os

from graph_auth.config import get_settings
from graph_auth.logging import configure_logging
from graph_auth.providers import FacebookProvider, generate_state


def main() -> None:
    configure_logging()
    settings = get_settings()
    with FacebookProvider.from_settings(settings) as provider:
        run(provider)


def run(provider: FacebookProvider) -> None:
    state = os.environ.get("GRAPH_AUTH_LOGIN_STATE") or generate_state(16)
    print("Login URL:", provider.redirect_to_authenticate(state))
    print("State:", state)
    # In a real app, redirect the user to the login URL and capture the 'code'.
    code = os.environ.get("GRAPH_AUTH_LOGIN_CODE")
    if not code:
        print("Set GRAPH_AUTH_LOGIN_CODE (and GRAPH_AUTH_LOGIN_STATE) to complete the flow.")
        return

    result = provider.authenticate_client({"code": code, "state": state}, state)
    if result is None:
        print("Callback parameters were not meant for Facebook.")
    elif result.error_information is not None:
        print("Authentication failed:", result.error_information.message)
    else:
        print("Authenticated:", result.user_information)


if __name__ == "__main__":
    main()
