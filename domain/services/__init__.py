"""
Domain services.

The script synthesis engine: form analysis, cache key derivation, tiered
script generation, fixed layout templates, validation, the retrying cache front and the
orchestrator composing them. Services depend only on domain models and
ports so that infrastructure and UI layers can remain thin.
"""

from .cache_key import derive_cache_key, structural_digest_source
from .form_analyzer import FormAnalyzer, classify_button_role, selector_in_html
from .orchestrator import ScriptOrchestrator
from .retry import linear_backoff, retry_async
from .script_cache import ScriptCache
from .script_synthesizer import (
    BASIC_NAVIGATION_SCRIPT,
    EMERGENCY_FALLBACK_SCRIPT,
    ScriptSynthesizer,
    SynthesisResult,
    extract_dsl_lines,
    generate_checkbox_sequence,
    generate_enhanced_script,
    generate_field_filling_sequence,
    generate_login_sequence,
    generate_navigation_sequence,
    generate_simple_script,
    generate_upload_sequence,
    is_complex_form,
)
from .templates import TEMPLATES, job_application_template, linkedin_apply_template, registration_template, render_template
from .validation import DslSyntaxError, check_dsl_syntax, ensure_dsl_syntax, validate_script

__all__ = [
    "FormAnalyzer",
    "classify_button_role",
    "selector_in_html",
    "derive_cache_key",
    "structural_digest_source",
    "retry_async",
    "linear_backoff",
    "ScriptCache",
    "ScriptSynthesizer",
    "SynthesisResult",
    "BASIC_NAVIGATION_SCRIPT",
    "EMERGENCY_FALLBACK_SCRIPT",
    "is_complex_form",
    "extract_dsl_lines",
    "generate_navigation_sequence",
    "generate_login_sequence",
    "generate_field_filling_sequence",
    "generate_upload_sequence",
    "generate_checkbox_sequence",
    "generate_enhanced_script",
    "generate_simple_script",
    "validate_script",
    "check_dsl_syntax",
    "ensure_dsl_syntax",
    "DslSyntaxError",
    "ScriptOrchestrator",
    "TEMPLATES",
    "render_template",
    "job_application_template",
    "registration_template",
    "linkedin_apply_template",
]
