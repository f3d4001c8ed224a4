"""Catalog CMS.

Content management backend for a product catalog (collections and
categories) with a human approval workflow and one-way synchronization
of approved state to Medusa.
"""

__version__ = "0.1.0"
