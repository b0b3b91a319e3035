"""apigen materializer -- turns the StarterKit template into a project.

Quick usage::

    from apigen.materializer import AnswerSet, Materializer, default_template_dir

    answers = AnswerSet(
        project_name="FooApi",
        kestrel_http_port=6002,
        iis_http_port=6001,
        iis_https_port=44362,
        data_provider="p",
        delete_content=True,
    )
    result = await Materializer(default_template_dir(), "./FooApi", answers).materialize()
"""

from apigen.materializer.answers import AnswerSet
from apigen.materializer.engine import (
    MaterializePlan,
    MaterializeResult,
    Materializer,
    TemplateFile,
    clear_destination,
    default_template_dir,
    discover_files,
    materialize,
)
from apigen.materializer.errors import (
    DestinationCollisionError,
    MaterializeError,
    TemplateIOError,
    TemplateNotFoundError,
    UnknownVariantError,
)
from apigen.materializer.rules import rename_file_path, should_include
from apigen.materializer.substitutions import (
    GUID_PLACEHOLDERS,
    Substitution,
    SubstitutionTable,
    build_substitution_table,
    generate_identifiers,
    transform_content,
)
from apigen.materializer.variants import Provider, VariantDescriptor, resolve_variant

__all__ = [
    "AnswerSet",
    "DestinationCollisionError",
    "GUID_PLACEHOLDERS",
    "MaterializeError",
    "MaterializePlan",
    "MaterializeResult",
    "Materializer",
    "Provider",
    "Substitution",
    "SubstitutionTable",
    "TemplateFile",
    "TemplateIOError",
    "TemplateNotFoundError",
    "UnknownVariantError",
    "VariantDescriptor",
    "build_substitution_table",
    "clear_destination",
    "default_template_dir",
    "discover_files",
    "generate_identifiers",
    "materialize",
    "rename_file_path",
    "resolve_variant",
    "should_include",
    "transform_content",
]
