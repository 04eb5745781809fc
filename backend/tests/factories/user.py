"""Factory Boy definition for :class:`donor_api.models.user.User`."""

from __future__ import annotations

import factory
from werkzeug.security import generate_password_hash

from donor_api.models.user import AccountStatus, BloodType, Role, User
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"
# Hashed once; hashing per instance would dominate the suite's runtime.
DEFAULT_PASSWORD_HASH = generate_password_hash(DEFAULT_PASSWORD)


class UserFactory(BaseFactory):
    """
    Build persisted :class:`donor_api.models.user.User` instances.

    Notes
    -----
    - Every user can log in with :data:`DEFAULT_PASSWORD` unless ``password``
      is passed explicitly.
    - Traits: ``admin=True`` adds the admin role, ``banned=True`` bans.
    """

    class Meta:
        model = User

    class Params:
        admin = factory.Trait(roles=frozenset({Role.USER, Role.ADMIN}))
        banned = factory.Trait(status=AccountStatus.BANNED)

    id = None  # let autoincrement handle it
    email = factory.Sequence(lambda n: f"donor{n}@example.com")
    password_hash = DEFAULT_PASSWORD_HASH
    full_name = factory.Faker("name")
    phone = factory.Sequence(lambda n: f"+1555{n:07d}")
    blood_type = factory.Iterator(list(BloodType))

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        """Set a specific password through the model setter (hashing)."""
        if extracted:
            obj.password = extracted
