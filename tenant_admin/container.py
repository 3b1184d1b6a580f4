# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Explicit wiring of repositories, services and use cases.

``create_app`` calls these builders once; routes read the resulting
``UseCases`` bundle from ``current_app``.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional

from .domain.authorization import TenantAccessPolicy
from .repositories import memory, mongo
from .services.identity import BCRYPT_ROUNDS, PasswordIdentityProvider
from .services.mongodb import MongoDBService
from .use_cases.auth import (
    DEFAULT_REMEMBER_ME_TTL,
    DEFAULT_SESSION_TTL,
    ChangePasswordUseCase,
    GetUserSessionsUseCase,
    LoginUseCase,
    RevokeAllSessionsUseCase,
    RevokeSessionUseCase,
)
from .use_cases.configuration_values import (
    CreateConfigurationValueUseCase,
    DeleteConfigurationValueUseCase,
    GetConfigurationValueByIdUseCase,
    GetConfigurationValuesUseCase,
    UpdateConfigurationValueUseCase,
)
from .use_cases.configurations import (
    CreateConfigurationUseCase,
    DeleteConfigurationUseCase,
    GetConfigurationByIdUseCase,
    GetConfigurationsUseCase,
    ReorderConfigurationsUseCase,
    UpdateConfigurationUseCase,
)
from .use_cases.contacts import (
    CreateContactInfoUseCase,
    DeleteContactInfoUseCase,
    GetContactInfosUseCase,
    SetPrimaryContactUseCase,
    UpdateContactInfoUseCase,
)
from .use_cases.fiscal_addresses import (
    CreateFiscalAddressUseCase,
    DeleteFiscalAddressUseCase,
    GetFiscalAddressUseCase,
    UpdateFiscalAddressUseCase,
)
from .use_cases.persons import (
    CreatePersonUseCase,
    DeletePersonUseCase,
    GetPersonByIdUseCase,
    GetPersonsUseCase,
    UpdatePersonUseCase,
)
from .use_cases.security_alerts import (
    AcknowledgeSecurityAlertUseCase,
    DismissSecurityAlertUseCase,
    GetSecurityAlertsUseCase,
    GetSecurityMetricsUseCase,
    ResolveSecurityAlertUseCase,
)
from .use_cases.user_settings import GetUserSettingsUseCase, UpdateUserSettingsUseCase
from .use_cases.users import CreateUserUseCase, GetCurrentUserUseCase, ListUsersUseCase, UpdateUserUseCase

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ('memory', 'mongodb')


@dataclass
class Repositories:
    tenants: Any
    users: Any
    persons: Any
    contacts: Any
    fiscal_addresses: Any
    configurations: Any
    configuration_values: Any
    sessions: Any
    security_alerts: Any
    user_settings: Any
    credentials: Any


@dataclass
class UseCases:
    """Every use case the HTTP surface can invoke."""

    # persons
    create_person: CreatePersonUseCase
    get_persons: GetPersonsUseCase
    get_person: GetPersonByIdUseCase
    update_person: UpdatePersonUseCase
    delete_person: DeletePersonUseCase
    # contacts
    create_contact: CreateContactInfoUseCase
    get_contacts: GetContactInfosUseCase
    update_contact: UpdateContactInfoUseCase
    set_primary_contact: SetPrimaryContactUseCase
    delete_contact: DeleteContactInfoUseCase
    # fiscal addresses
    create_fiscal_address: CreateFiscalAddressUseCase
    get_fiscal_address: GetFiscalAddressUseCase
    update_fiscal_address: UpdateFiscalAddressUseCase
    delete_fiscal_address: DeleteFiscalAddressUseCase
    # configurations
    create_configuration: CreateConfigurationUseCase
    get_configurations: GetConfigurationsUseCase
    get_configuration: GetConfigurationByIdUseCase
    update_configuration: UpdateConfigurationUseCase
    delete_configuration: DeleteConfigurationUseCase
    reorder_configurations: ReorderConfigurationsUseCase
    create_configuration_value: CreateConfigurationValueUseCase
    get_configuration_values: GetConfigurationValuesUseCase
    get_configuration_value: GetConfigurationValueByIdUseCase
    update_configuration_value: UpdateConfigurationValueUseCase
    delete_configuration_value: DeleteConfigurationValueUseCase
    # auth
    login: LoginUseCase
    get_sessions: GetUserSessionsUseCase
    revoke_session: RevokeSessionUseCase
    revoke_all_sessions: RevokeAllSessionsUseCase
    change_password: ChangePasswordUseCase
    # security alerts
    get_security_alerts: GetSecurityAlertsUseCase
    acknowledge_security_alert: AcknowledgeSecurityAlertUseCase
    resolve_security_alert: ResolveSecurityAlertUseCase
    dismiss_security_alert: DismissSecurityAlertUseCase
    get_security_metrics: GetSecurityMetricsUseCase
    # settings and users
    get_user_settings: GetUserSettingsUseCase
    update_user_settings: UpdateUserSettingsUseCase
    get_current_user: GetCurrentUserUseCase
    list_users: ListUsersUseCase
    create_user: CreateUserUseCase
    update_user: UpdateUserUseCase


def build_memory_repositories() -> Repositories:
    return Repositories(
        tenants=memory.InMemoryTenantRepository(),
        users=memory.InMemoryUserRepository(),
        persons=memory.InMemoryPersonRepository(),
        contacts=memory.InMemoryContactInfoRepository(),
        fiscal_addresses=memory.InMemoryFiscalAddressRepository(),
        configurations=memory.InMemoryConfigurationRepository(),
        configuration_values=memory.InMemoryConfigurationValueRepository(),
        sessions=memory.InMemorySessionRepository(),
        security_alerts=memory.InMemorySecurityAlertRepository(),
        user_settings=memory.InMemoryUserSettingsRepository(),
        credentials=memory.InMemoryCredentialStore()
    )


def build_mongo_repositories(mongodb: MongoDBService) -> Repositories:
    return Repositories(
        tenants=mongo.MongoTenantRepository(mongodb),
        users=mongo.MongoUserRepository(mongodb),
        persons=mongo.MongoPersonRepository(mongodb),
        contacts=mongo.MongoContactInfoRepository(mongodb),
        fiscal_addresses=mongo.MongoFiscalAddressRepository(mongodb),
        configurations=mongo.MongoConfigurationRepository(mongodb),
        configuration_values=mongo.MongoConfigurationValueRepository(mongodb),
        sessions=mongo.MongoSessionRepository(mongodb),
        security_alerts=mongo.MongoSecurityAlertRepository(mongodb),
        user_settings=mongo.MongoUserSettingsRepository(mongodb),
        credentials=mongo.MongoCredentialStore(mongodb)
    )


def build_repositories(backend: str, mongodb: Optional[MongoDBService] = None) -> Repositories:
    """
    Build the repository set for a storage backend.

    Args:
        backend: ``memory`` or ``mongodb``
        mongodb: Connection holder, required for ``mongodb``
    """
    if backend not in STORAGE_BACKENDS:
        raise ValueError(f"Unknown storage backend: {backend}")

    logger.info(f"Building repositories for storage backend: {backend}")
    if backend == 'mongodb':
        if mongodb is None:
            raise ValueError("MongoDB service is required for the mongodb backend")
        return build_mongo_repositories(mongodb)
    return build_memory_repositories()


def build_use_cases(
    repositories: Repositories,
    session_ttl: timedelta = DEFAULT_SESSION_TTL,
    remember_me_ttl: timedelta = DEFAULT_REMEMBER_ME_TTL,
    bcrypt_rounds: int = BCRYPT_ROUNDS
) -> UseCases:
    r = repositories
    policy = TenantAccessPolicy(r.users)
    identity_provider = PasswordIdentityProvider(r.users, r.credentials, rounds=bcrypt_rounds)

    return UseCases(
        create_person=CreatePersonUseCase(policy, r.persons, r.configurations),
        get_persons=GetPersonsUseCase(policy, r.persons),
        get_person=GetPersonByIdUseCase(policy, r.persons, r.contacts),
        update_person=UpdatePersonUseCase(policy, r.persons, r.configurations),
        delete_person=DeletePersonUseCase(policy, r.persons, r.contacts, r.fiscal_addresses),
        create_contact=CreateContactInfoUseCase(policy, r.persons, r.contacts),
        get_contacts=GetContactInfosUseCase(policy, r.persons, r.contacts),
        update_contact=UpdateContactInfoUseCase(policy, r.persons, r.contacts),
        set_primary_contact=SetPrimaryContactUseCase(policy, r.persons, r.contacts),
        delete_contact=DeleteContactInfoUseCase(policy, r.persons, r.contacts),
        create_fiscal_address=CreateFiscalAddressUseCase(policy, r.persons, r.fiscal_addresses),
        get_fiscal_address=GetFiscalAddressUseCase(policy, r.persons, r.fiscal_addresses),
        update_fiscal_address=UpdateFiscalAddressUseCase(policy, r.persons, r.fiscal_addresses),
        delete_fiscal_address=DeleteFiscalAddressUseCase(policy, r.persons, r.fiscal_addresses),
        create_configuration=CreateConfigurationUseCase(policy, r.configurations),
        get_configurations=GetConfigurationsUseCase(policy, r.configurations),
        get_configuration=GetConfigurationByIdUseCase(policy, r.configurations),
        update_configuration=UpdateConfigurationUseCase(policy, r.configurations),
        delete_configuration=DeleteConfigurationUseCase(policy, r.configurations),
        reorder_configurations=ReorderConfigurationsUseCase(policy, r.configurations),
        create_configuration_value=CreateConfigurationValueUseCase(policy, r.configurations, r.configuration_values),
        get_configuration_values=GetConfigurationValuesUseCase(policy, r.configurations, r.configuration_values),
        get_configuration_value=GetConfigurationValueByIdUseCase(policy, r.configurations, r.configuration_values),
        update_configuration_value=UpdateConfigurationValueUseCase(policy, r.configurations, r.configuration_values),
        delete_configuration_value=DeleteConfigurationValueUseCase(policy, r.configurations, r.configuration_values),
        login=LoginUseCase(r.users, r.sessions, identity_provider, session_ttl, remember_me_ttl),
        get_sessions=GetUserSessionsUseCase(policy, r.sessions),
        revoke_session=RevokeSessionUseCase(policy, r.sessions),
        revoke_all_sessions=RevokeAllSessionsUseCase(policy, r.sessions),
        change_password=ChangePasswordUseCase(policy, identity_provider),
        get_security_alerts=GetSecurityAlertsUseCase(policy, r.security_alerts),
        acknowledge_security_alert=AcknowledgeSecurityAlertUseCase(policy, r.security_alerts),
        resolve_security_alert=ResolveSecurityAlertUseCase(policy, r.security_alerts),
        dismiss_security_alert=DismissSecurityAlertUseCase(policy, r.security_alerts),
        get_security_metrics=GetSecurityMetricsUseCase(policy, r.security_alerts),
        get_user_settings=GetUserSettingsUseCase(policy, r.user_settings),
        update_user_settings=UpdateUserSettingsUseCase(policy, r.user_settings),
        get_current_user=GetCurrentUserUseCase(policy),
        list_users=ListUsersUseCase(policy, r.users, r.tenants),
        create_user=CreateUserUseCase(policy, r.users, r.tenants),
        update_user=UpdateUserUseCase(policy, r.users, r.tenants)
    )
