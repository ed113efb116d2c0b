from protodoc.format import field_to_token, final_token, format_comment, format_enum, format_oneof
from protodoc.models import Formatter, Token


def _field(registry, message_name: str, field_name: str):
    return registry.find_message(message_name).fields_by_name[field_name]


INTERVAL_COMMENT = (
    "# Interval between two probe runs in milliseconds.\n"
    "# Only one of \"interval\" and \"inteval_msec\" should be defined.\n"
    "# Default interval is 2s.\n"
    "#"
)


class TestFinalToken:
    def test_no_comment(self, registry):
        fld = _field(registry, "cloudprober.probes.ProbeDef", "interval_msec")

        tok = final_token(registry, fld, Formatter(), nocomment=True)

        assert tok == Token(kind="int32", text="interval_msec")

    def test_not_yaml(self, registry):
        fld = _field(registry, "cloudprober.probes.ProbeDef", "interval_msec")

        tok = final_token(registry, fld, Formatter())

        assert tok == Token(kind="int32", text="interval_msec", comment=INTERVAL_COMMENT)

    def test_yaml_uses_json_name(self, registry):
        fld = _field(registry, "cloudprober.probes.ProbeDef", "interval_msec")

        tok = final_token(registry, fld, Formatter(yaml=True))

        assert tok.text == "intervalMsec"
        assert tok.comment == INTERVAL_COMMENT
        assert tok.yaml is True

    def test_yaml_with_prefix(self, registry):
        fld = _field(registry, "cloudprober.probes.ProbeDef", "interval_msec")

        tok = final_token(registry, fld, Formatter(yaml=True, prefix="  "))

        assert tok.prefix == "  "
        assert tok.comment == (
            "  # Interval between two probe runs in milliseconds.\n"
            "  # Only one of \"interval\" and \"inteval_msec\" should be defined.\n"
            "  # Default interval is 2s.\n"
            "  #"
        )

    def test_message_kind_is_full_name(self, registry):
        fld = _field(registry, "cloudprober.ProberConfig", "targets")

        tok = final_token(registry, fld, Formatter())

        assert tok.kind == "cloudprober.targets.TargetsDef"

    def test_int_default(self, registry):
        fld = _field(registry, "cloudprober.probes.ProbeDef", "timeout_msec")
        assert final_token(registry, fld, Formatter()).default == "1000"

    def test_bool_default(self, registry):
        fld = _field(registry, "cloudprober.probes.ProbeDef", "debug_options")
        assert final_token(registry, fld, Formatter()).default == "false"

    def test_enum_default_uses_value_name(self, registry):
        fld = _field(registry, "cloudprober.probes.http.HttpProbe", "method")
        assert final_token(registry, fld, Formatter()).default == "GET"

    def test_float_default_is_shortest_float32(self, registry):
        fld = _field(registry, "cloudprober.probes.PingProbe", "loss_ratio")

        tok = final_token(registry, fld, Formatter())

        assert tok.kind == "float"
        assert tok.default == "0.1"

    def test_double_default(self, registry):
        fld = _field(registry, "cloudprober.probes.PingProbe", "jitter_ratio")

        tok = final_token(registry, fld, Formatter())

        assert tok.kind == "double"
        assert tok.default == "0.1"

    def test_no_declared_default(self, registry):
        fld = _field(registry, "cloudprober.probes.ProbeDef", "name")
        assert final_token(registry, fld, Formatter()).default == ""


class TestFormatComment:
    def test_single_line(self, registry):
        comment = format_comment(registry, "cloudprober.ProberConfig.probe", Formatter(prefix="    "))
        assert comment == "    # Probes to run."

    def test_missing_comment(self, registry):
        assert format_comment(registry, "cloudprober.ProberConfig.targets", Formatter()) == ""


class TestFormatEnum:
    def test_values_in_declaration_order(self, registry):
        ed = registry.find_message("cloudprober.probes.ProbeDef").enum_types_by_name["Type"]

        tok = format_enum(registry, ed, "type", Formatter(prefix="  "))

        assert tok.kind == "enum"
        assert tok.text == "type: (PING|HTTP|DNS)"
        assert tok.prefix == "  "
        assert tok.comment == "  # Probe type."


class TestFormatOneof:
    def test_alternatives_with_links(self, registry):
        ood = registry.find_message("cloudprober.probes.ProbeDef").oneofs_by_name["probe"]

        tok = format_oneof(registry, ood, Formatter())

        assert tok.kind == "oneof"
        assert tok.comment == "# Probe specific configuration."
        assert str(tok.text_html) == (
            '[http_probe &lt;<a href="probes#cloudprober_probes_http_HttpProbe">'
            "cloudprober.probes.http.HttpProbe</a>&gt; | "
            'ping_probe &lt;<a href="probes#cloudprober_probes_PingProbe">'
            "cloudprober.probes.PingProbe</a>&gt; | "
            "\n&nbsp;external_probe &lt;string&gt;]"
        )

    def test_continuation_aligned_under_bracket(self, registry):
        ood = registry.find_message("cloudprober.probes.ProbeDef").oneofs_by_name["probe"]

        tok = format_oneof(registry, ood, Formatter(prefix="  "))

        assert "\n&nbsp;&nbsp;&nbsp;external_probe" in tok.text_html

    def test_enum_alternative(self, registry):
        ood = registry.find_message("cloudprober.probes.ProbeDef").oneofs_by_name["extra"]

        tok = format_oneof(registry, ood, Formatter(yaml=True))

        assert str(tok.text_html) == "[latencyUnit (PING|HTTP|DNS) | validator &lt;string&gt;]"

    def test_yaml_names(self, registry):
        ood = registry.find_message("cloudprober.probes.ProbeDef").oneofs_by_name["probe"]

        tok = format_oneof(registry, ood, Formatter(yaml=True))

        assert "httpProbe &lt;" in tok.text_html
        assert "externalProbe &lt;string&gt;" in tok.text_html


class TestFieldToToken:
    def test_oneof_emitted_once(self, registry):
        md = registry.find_message("cloudprober.probes.ProbeDef")
        done = set()

        first = field_to_token(registry, md.fields_by_name["ping_probe"], Formatter(), done)
        second = field_to_token(registry, md.fields_by_name["http_probe"], Formatter(), done)

        assert first.kind == "oneof"
        assert second is None

    def test_enum_field_uses_field_comment(self, registry):
        fld = _field(registry, "cloudprober.probes.ProbeDef", "type")

        tok = field_to_token(registry, fld, Formatter(), set())

        assert tok.kind == "enum"
        assert tok.text == "type: (PING|HTTP|DNS)"
        assert tok.comment == "# Type of the probe."

    def test_proto3_optional_is_ordinary_field(self, registry):
        fld = _field(registry, "cloudprober.targets.TargetsDef", "host_names")

        tok = field_to_token(registry, fld, Formatter(yaml=True), set())

        assert tok.kind == "string"
        assert tok.text == "hostNames"
