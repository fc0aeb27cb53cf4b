"""Unit tests for module resolution.

Covers the probing order (exact file, extensions, directory index), deep
relative paths, absolute specifiers and unresolvable references.
"""

import os

import pytest

from depviz.module_resolver import ModuleResolver, resolve_import_path


@pytest.fixture
def project(make_project):
    return make_project(
        {
            "src/app.ts": "",
            "src/components/Button.tsx": "",
            "src/components/index.ts": "",
            "src/utils/helpers.js": "",
            "src/utils/helpers.ts": "",
            "src/data.json": "",
            "src/styles.css": "",
            "src/lib/index.jsx": "",
            "src/lib/index.tsx": "",
            "src/empty/readme.md": "",
            "src/deep/a/b/c/leaf.ts": "",
        }
    )


def _rel(path, root):
    return os.path.relpath(path, root).replace(os.sep, "/")


class TestModuleResolver:
    def test_extension_probe(self, project):
        resolver = ModuleResolver(project)
        result = resolver.resolve("./components/Button", project / "src" / "app.ts")

        assert _rel(result, project) == "src/components/Button.tsx"

    def test_extension_order_follows_configuration(self, project):
        resolver = ModuleResolver(project)
        app = project / "src" / "app.ts"

        assert _rel(resolver.resolve("./utils/helpers", app), project) == "src/utils/helpers.js"

        ts_first = ModuleResolver(project, extensions=[".ts", ".js"])
        assert _rel(ts_first.resolve("./utils/helpers", app), project) == "src/utils/helpers.ts"

    def test_exact_file_wins_even_with_unsupported_extension(self, project):
        resolver = ModuleResolver(project)

        result = resolver.resolve("./data.json", project / "src" / "app.ts")

        assert _rel(result, project) == "src/data.json"

    def test_directory_index(self, project):
        resolver = ModuleResolver(project)
        app = project / "src" / "app.ts"

        assert _rel(resolver.resolve("./components", app), project) == "src/components/index.ts"
        assert _rel(resolver.resolve("./lib", app), project) == "src/lib/index.jsx"

    def test_directory_without_index_is_unresolved(self, project):
        resolver = ModuleResolver(project)

        assert resolver.resolve("./empty", project / "src" / "app.ts") is None

    def test_deep_relative_path(self, project):
        resolver = ModuleResolver(project)
        leaf = project / "src" / "deep" / "a" / "b" / "c" / "leaf.ts"

        result = resolver.resolve("../../../../utils/helpers", leaf)

        assert _rel(result, project) == "src/utils/helpers.js"

    def test_absolute_specifier(self, project):
        resolver = ModuleResolver(project)
        target = str(project / "src" / "components" / "Button")

        result = resolver.resolve(target, project / "src" / "app.ts")

        assert _rel(result, project) == "src/components/Button.tsx"

    def test_missing_target(self, project):
        resolver = ModuleResolver(project)

        assert resolver.resolve("./nowhere", project / "src" / "app.ts") is None

    def test_result_is_canonical(self, project):
        resolver = ModuleResolver(project)

        a = resolver.resolve("./components/../utils/helpers", project / "src" / "app.ts")
        b = resolver.resolve("./utils/helpers", project / "src" / "app.ts")

        assert a == b
        assert os.path.isabs(a)
        assert ".." not in a.split(os.sep)

    def test_resolution_is_memoized_and_idempotent(self, project):
        resolver = ModuleResolver(project)
        app = project / "src" / "app.ts"

        first = resolver.resolve("./components/Button", app)
        second = resolver.resolve("./components/Button", app)

        assert first == second
        assert resolver.cache_info().hits >= 1

    def test_memo_survives_disk_changes_within_a_run(self, project):
        resolver = ModuleResolver(project)
        app = project / "src" / "app.ts"

        first = resolver.resolve("./components/Button", app)
        (project / "src" / "components" / "Button.tsx").unlink()

        assert resolver.resolve("./components/Button", app) == first


def test_resolve_import_path_one_shot(project):
    result = resolve_import_path("./components/Button", project / "src" / "app.ts", project)

    assert _rel(result, project) == "src/components/Button.tsx"
