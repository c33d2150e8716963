"""
Log in to X from the terminal and print who you are.

You'll need an X app with OAuth 2.0 enabled and these environment variables
(a .env file works too):

    X_CLIENT_ID, X_CLIENT_SECRET, X_REDIRECT_URI

Open the printed URL, approve the app, then paste the full URL your browser
was redirected to.

X API: https://docs.x.com/resources/fundamentals/authentication/oauth-2-0/authorization-code
"""

import asyncio
import logging

from dotenv import load_dotenv

from xoauth.models.config import ClientConfig
from xoauth.models.session import InMemorySession
from xoauth.oauth_client import XOAuth2Client
from xoauth.services.security import parse_callback_url, validate_state


def log_session_update(old_data, new_data, session_id) -> None:
    logging.info(f"Session {session_id} updated: {old_data!r} -> {new_data!r}")


async def main():
    config = ClientConfig.from_env()
    session = InMemorySession()

    async with XOAuth2Client.from_config(config, log_session_update) as client:
        authorization_url, parameters = client.start_authorization(session)
        print(f"Visit this URL to authorize the app:\n\n  {authorization_url}\n")

        callback_url = await asyncio.to_thread(input, "Paste the callback URL: ")
        callback = parse_callback_url(callback_url.strip())
        if callback["error"]:
            raise SystemExit(
                f"Authorization denied: {callback['error']} "
                f"({callback['error_description'] or ''})"
            )
        validate_state(parameters.state, callback["state"])

        user = await client.handle_callback(callback["code"], session)
        print(f"Logged in as @{user.username} ({user.id})")

        me = await client.get(
            "users/me",
            {"user.fields": "created_at,description"},
            {"Authorization": f"Bearer {user.access_token}"},
            session,
        )
        print(me)

        await client.logout(session)


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
