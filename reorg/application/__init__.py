"""Application layer: store port, DTOs, services, use cases.

Depends only on domain and protocol definitions (DIP).
"""
