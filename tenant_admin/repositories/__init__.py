# SPDX-License-Identifier: Apache-2.0

"""
Repository implementations.

``memory`` holds dict-backed stores for tests and local runs, ``mongo``
holds the pymongo-backed stores used in deployed environments.
"""
