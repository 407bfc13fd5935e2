"""
Unit tests for rendering and emitting the handlers module.
"""

import ast
import io
import textwrap

import pytest

from apigen.api.generator import (
    build_source_artifact,
    emit,
    generate_file,
    generate_source,
    python_literal,
    python_tuple,
)
from apigen.errors import MalformedInputError, MalformedRouteError


class TestRender:

    @pytest.fixture
    def rendered(self, sample_api_source):
        return generate_source(sample_api_source, "api")

    def test_output_is_valid_python(self, rendered):
        ast.parse(rendered)

    def test_header_comes_first(self, rendered):
        assert rendered.startswith('"""Code generated by apigen from api.py. DO NOT EDIT."""\n')
        assert "from api import ApiError, ProfileParams, CreateParams, OtherCreateParams\n" in rendered
        assert 'AUTH_HEADER = "X-Auth"\n' in rendered
        assert 'AUTH_TOKEN = "100500"\n' in rendered

    def test_section_order(self, rendered):
        positions = [
            rendered.index("def response_write("),
            rendered.index("async def my_api_serve_http("),
            rendered.index("async def other_api_serve_http("),
            rendered.index("async def my_api_profile("),
            rendered.index("async def my_api_create("),
            rendered.index("async def other_api_create("),
        ]
        assert positions == sorted(positions)

    def test_auth_checked_before_method(self, rendered):
        dispatch = rendered[rendered.index("async def my_api_serve_http("):rendered.index("async def other_api_serve_http(")]
        create_case = dispatch[dispatch.index('if path == "/user/create":'):]
        assert create_case.index("ERROR_UNAUTHORIZED") < create_case.index("ERROR_BAD_METHOD")
        assert 'if request.method != "POST":' in create_case

    def test_profile_case_has_no_guards(self, rendered):
        dispatch = rendered[rendered.index("async def my_api_serve_http("):rendered.index('if path == "/user/create":')]
        assert "AUTH_HEADER" not in dispatch
        assert "request.method" not in dispatch

    def test_wrapper_body(self, rendered):
        wrapper = rendered[rendered.index("async def my_api_create("):rendered.index("async def other_api_create(")]
        expected = textwrap.dedent('''\
            async def my_api_create(structure, request):
                form = await parse_form(request)

                login = form.get("login", "")
                if login == "":
                    return response_write(HTTPStatus.BAD_REQUEST, "login must be not empty")
                if len(login) < 10:
                    return response_write(HTTPStatus.BAD_REQUEST, "login len must be >= 10")

                name = form.get("full_name", "")

                status = form.get("status", "")
                if status == "":
                    status = "user"
                if status not in ("user", "moderator", "admin"):
                    return response_write(HTTPStatus.BAD_REQUEST, "status must be one of [user, moderator, admin]")

                try:
                    age = parse_int(form.get("age", ""))
                except ValueError:
                    return response_write(HTTPStatus.BAD_REQUEST, "age must be int")
                if age < 0:
                    return response_write(HTTPStatus.BAD_REQUEST, "age must be >= 0")
                if age > 128:
                    return response_write(HTTPStatus.BAD_REQUEST, "age must be <= 128")

                try:
                    action_result = await run_in_threadpool(structure.create, request, CreateParams(
                        login=login,
                        name=name,
                        status=status,
                        age=age,
                    ))
                except ApiError as action_error:
                    return response_write(action_error.http_status, str(action_error))

                return response_write(HTTPStatus.OK, "", action_result)
            ''')
        assert wrapper.strip() == expected.strip()

    def test_async_action_is_awaited(self):
        source = textwrap.dedent("""
            from typing import Annotated

            class ApiError(Exception):
                pass

            class Params:
                login: Annotated[str, "apivalidator:required"]

            class Api:
                # apigen:api {"url": "/x"}
                async def fetch(self, ctx, params: Params):
                    return params.login
        """)
        rendered = generate_source(source, "api")
        assert "action_result = await structure.fetch(request, Params(" in rendered

    def test_single_alternative_enum_is_a_tuple(self):
        source = textwrap.dedent("""
            from typing import Annotated

            class Params:
                mode: Annotated[str, "apivalidator:enum=fast"]

            class Api:
                # apigen:api {"url": "/x"}
                def run(self, ctx, params: Params):
                    pass
        """)
        assert 'if mode not in ("fast",):' in generate_source(source, "api")

    def test_catch_all_route_takes_every_method(self, rendered):
        assert 'app.add_route("/{path:path}", dispatch, include_in_schema=False)' in rendered
        assert "methods=" not in rendered

    def test_module_without_actions_renders_header_only(self):
        rendered = generate_source("x = 1\n", "api")
        ast.parse(rendered)
        assert "from api import" not in rendered
        assert rendered.endswith("    return app\n")


class TestDeterminism:

    def test_identical_runs_are_byte_identical(self, sample_api_source):
        assert generate_source(sample_api_source, "api") == generate_source(sample_api_source, "api")

    def test_rule_order_in_directive_does_not_change_output(self):
        template = textwrap.dedent("""
            from typing import Annotated

            class Params:
                code: Annotated[str, "apivalidator:{directive}"]

            class Api:
                # apigen:api {{"url": "/x"}}
                def run(self, ctx, params: Params):
                    pass
        """)
        first = generate_source(template.format(directive="required,min=1,max=4,enum=ab|cd"), "api")
        second = generate_source(template.format(directive="enum=ab|cd,max=4,required,min=1"), "api")
        assert first == second


class TestEmit:

    def test_emit_writes_rendered_text(self, sample_api_source):
        sink = io.StringIO()
        emit(build_source_artifact(sample_api_source, "api"), sink)
        assert sink.getvalue() == generate_source(sample_api_source, "api")

    def test_generate_file_uses_input_stem(self, sample_api_source, temp_output_dir):
        source_path = temp_output_dir / "users.py"
        source_path.write_text(sample_api_source, encoding="utf-8")
        output_path = generate_file(source_path, temp_output_dir / "out" / "users_handlers.py")

        content = output_path.read_bytes().decode("utf-8")
        assert "from users import ApiError" in content
        assert "\r\n" not in content

    def test_nothing_written_on_failure(self, temp_output_dir):
        source_path = temp_output_dir / "api.py"
        source_path.write_text('class A:\n    # apigen:api {"auth": true}\n    def f(self, ctx, p: A):\n        pass\n')
        output_path = temp_output_dir / "api_handlers.py"
        with pytest.raises(MalformedRouteError):
            generate_file(source_path, output_path)
        assert not output_path.exists()

    def test_render_failure_keeps_previous_output(self, sample_api_source, temp_output_dir, monkeypatch):
        source_path = temp_output_dir / "api.py"
        source_path.write_text(sample_api_source, encoding="utf-8")
        output_path = temp_output_dir / "api_handlers.py"
        output_path.write_text("# previous run\n", encoding="utf-8")

        def broken_render(artifact):
            raise RuntimeError("template exploded")

        monkeypatch.setattr("apigen.api.generator.render_artifact", broken_render)
        with pytest.raises(RuntimeError, match="template exploded"):
            generate_file(source_path, output_path)
        assert output_path.read_text(encoding="utf-8") == "# previous run\n"

    def test_module_name_must_be_importable(self, temp_output_dir):
        source_path = temp_output_dir / "my-api.py"
        source_path.write_text("x = 1\n")
        with pytest.raises(MalformedInputError, match="not an importable module name"):
            generate_file(source_path, temp_output_dir / "out.py")


def test_python_literal():
    assert python_literal('say "hi"\n') == '"say \\"hi\\"\\n"'
    assert python_literal(5) == "5"
    assert python_tuple(["a"]) == '("a",)'
    assert python_tuple([1, 2]) == "(1, 2)"
