"""Sidecar Core Meta information.
   Sidecar Core is the local data and secret-management layer
   of the Sidecar desktop assistant.
"""
__title__ = 'sidecar_core'
__description__ = (
   'Local storage, field encryption, OS keychain access and '
   'OAuth state protection for the Sidecar assistant.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2025 Sidecar Contributors'
__author__ = 'Sidecar Contributors'
__license__ = 'Apache-2.0'
