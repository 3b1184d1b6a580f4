# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Password policy checks applied when a user changes their password.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

SPECIAL_CHARACTERS = re.compile(r'[!@#$%^&*()_+\-=\[\]{};\':"\\|,.<>/?]')

COMMON_PASSWORDS = frozenset({
    'password', '123456', '123456789', 'qwerty', 'abc123', 'password123',
    'admin', 'letmein', 'welcome', 'monkey', '1234567890', 'password1',
    'qwerty123', 'dragon', 'master', 'hello', 'freedom', 'whatever',
    'qazwsx', 'trustno1', 'jordan23', 'harley', 'ranger', 'jordan',
    'hunter', 'buster', 'soccer', 'hockey', 'killer', 'george',
    'andrew', 'charlie', 'superman', 'dallas', 'jessica', 'pepper',
    '1234', '696969', 'jennifer', 'zxcvbnm', 'asdfgh',
})

COMMON_SEQUENCES = ('123', 'abc', 'qwerty', 'asdf', 'zxcv')


@dataclass(frozen=True)
class PasswordPolicy:
    min_length: int = 8
    max_length: int = 128
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_numbers: bool = True
    require_special_chars: bool = True
    prevent_common_passwords: bool = True
    prevent_user_info: bool = True


DEFAULT_PASSWORD_POLICY = PasswordPolicy()


@dataclass
class PasswordCheck:
    """Outcome of evaluating a password against a policy."""
    errors: List[str] = field(default_factory=list)
    score: int = 0

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _personal_tokens(email: Optional[str], name: Optional[str]) -> List[str]:
    tokens = []
    if email:
        tokens.append(email.split('@', 1)[0].lower())
    if name:
        tokens.extend(part.lower() for part in name.split())
    return [token for token in tokens if len(token) >= 3]


def evaluate_password(
    password: str,
    email: Optional[str] = None,
    name: Optional[str] = None,
    policy: PasswordPolicy = DEFAULT_PASSWORD_POLICY
) -> PasswordCheck:
    """
    Evaluate ``password`` against ``policy``.

    Every violated rule adds one message; satisfied rules add to a 0-100
    strength score.
    """
    check = PasswordCheck()

    if len(password) < policy.min_length:
        check.errors.append(f'Password must be at least {policy.min_length} characters long')
    else:
        check.score += 20

    if len(password) > policy.max_length:
        check.errors.append(f'Password cannot exceed {policy.max_length} characters')

    rules = (
        (policy.require_uppercase, re.search(r'[A-Z]', password), 'Password must contain at least one uppercase letter'),
        (policy.require_lowercase, re.search(r'[a-z]', password), 'Password must contain at least one lowercase letter'),
        (policy.require_numbers, re.search(r'\d', password), 'Password must contain at least one number'),
        (policy.require_special_chars, SPECIAL_CHARACTERS.search(password), 'Password must contain at least one special character'),
    )
    for enabled, satisfied, message in rules:
        if not enabled:
            continue
        if satisfied:
            check.score += 15
        else:
            check.errors.append(message)

    lowered = password.lower()
    if policy.prevent_common_passwords:
        if lowered in COMMON_PASSWORDS:
            check.errors.append('Password is too common')
        else:
            check.score += 10

    if policy.prevent_user_info and (email or name):
        if any(token in lowered for token in _personal_tokens(email, name)):
            check.errors.append('Password cannot contain personal information')
        else:
            check.score += 10

    if any(sequence in lowered for sequence in COMMON_SEQUENCES):
        check.score -= 10

    check.score = max(0, min(100, check.score))
    return check
