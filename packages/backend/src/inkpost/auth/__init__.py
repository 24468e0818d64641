"""Authentication and authorization.

Learn: Users log in with email/password and receive a signed JWT that is
valid for a few hours. Every request passes through a soft gate that
attaches an identity when a valid Bearer token is present; each handler
then decides whether it needs one.
"""
