"""Feature modules for Mini Wallet.

- account: Wallet session lifecycle and dashboard
- transfer: Fee estimation, confirmation and submission
- address_book: Contact management
- history: Transfer history
"""
