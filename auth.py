import logging
from typing import Any, Callable, Dict, Mapping, Optional

from flask_login import LoginManager, login_user
from pydantic import ValidationError

from forms import LoginForm
from models import db, User

logger = logging.getLogger(__name__)

login_manager = LoginManager()
login_manager.login_view = "dashboard.login"


class AuthError(Exception):
    """Sign-in rejection; ``type`` names the kind of failure."""

    type = "AuthError"

    def __init__(self, type: Optional[str] = None, message: str = ""):
        if type is not None:
            self.type = type
        super().__init__(message or self.type)


class CredentialsSignin(AuthError):
    type = "CredentialsSignin"


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


def authorize_credentials(form: Mapping[str, Any]) -> Optional[User]:
    try:
        credentials = LoginForm.model_validate(
            {"email": form.get("email"), "password": form.get("password")}
        )
    except ValidationError:
        return None
    user = User.query.filter_by(email=credentials.email.lower()).first()
    if not user or not user.check_password(credentials.password):
        return None
    return user


PROVIDERS: Dict[str, Callable[[Mapping[str, Any]], Optional[User]]] = {
    "credentials": authorize_credentials,
}


def sign_in(provider: str, form: Mapping[str, Any]) -> User:
    """Check ``form`` with ``provider`` and log the user into the session.

    Raises ``AuthError("Configuration")`` for an unknown provider and
    ``CredentialsSignin`` when the provider rejects the form.
    """
    authorize = PROVIDERS.get(provider)
    if authorize is None:
        raise AuthError("Configuration", f"Unknown sign-in provider: {provider}")
    user = authorize(form)
    if user is None:
        logger.info("Rejected %s sign-in", provider)
        raise CredentialsSignin()
    login_user(user)
    logger.info("User %s signed in", user.id)
    return user
