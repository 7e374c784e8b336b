"""chrootctl - Safe teardown of bind-mounted chroot environments."""

__version__ = "0.1.0"
