"""runner-add-ssh — provision and start a hardened OpenSSH server."""

__version__ = "0.1.0"
