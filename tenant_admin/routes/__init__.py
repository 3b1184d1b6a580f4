# SPDX-License-Identifier: Apache-2.0

"""
HTTP routes. Each module exposes one flask-openapi3 ``APIBlueprint``.
"""
