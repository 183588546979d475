"""Service layer: the Configurator builder and CLI-facing services.

CLI-facing services return :class:`~configurator.services.result.ServiceResult`;
they never raise for a failed check.
"""
