"""
Where: certsync/tests/test_package_exports.py
What: Guard tests for package-level exports.
Why: Prevent regressions when editing package __init__.py files.
"""


def test_services_package_re_exports() -> None:
    from certsync.services import ArtifactWriter, SyncOrchestrator, SyncScheduler

    assert ArtifactWriter.__name__ == "ArtifactWriter"
    assert SyncOrchestrator.__name__ == "SyncOrchestrator"
    assert SyncScheduler.__name__ == "SyncScheduler"


def test_models_package_re_exports() -> None:
    from certsync.models import CertificateCollection, RunReport

    assert CertificateCollection.__name__ == "CertificateCollection"
    assert RunReport.__name__ == "RunReport"
