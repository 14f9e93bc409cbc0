"""Text fragments of the generated import descriptors.

Every renderer returns a list of lines without trailing newlines; the
generators join them. Blank strings separate blocks.
"""

from __future__ import annotations

import textwrap
from collections.abc import Iterable, Mapping

from exportgen.models import ARTIFACT_TYPE_KEYWORD, Artifact, Platform

RULE = "#" + "-" * 64

POLICY_PREAMBLE = textwrap.dedent("""\
    if("${CMAKE_MAJOR_VERSION}.${CMAKE_MINOR_VERSION}" LESS 2.5)
       message(FATAL_ERROR "CMake >= 2.6.0 required")
    endif()
    cmake_policy(PUSH)
    cmake_policy(VERSION 2.6)""").splitlines()

EXPECTED_TARGETS_TEMPLATE = textwrap.dedent("""\
    # Protect against multiple inclusion, which would fail when already imported targets are added once more.
    set(_targetsDefined)
    set(_targetsNotDefined)
    set(_expectedTargets)
    foreach(_expectedTarget {names})
      list(APPEND _expectedTargets ${{_expectedTarget}})
      if(NOT TARGET ${{_expectedTarget}})
        list(APPEND _targetsNotDefined ${{_expectedTarget}})
      endif()
      if(TARGET ${{_expectedTarget}})
        list(APPEND _targetsDefined ${{_expectedTarget}})
      endif()
    endforeach()
    if("${{_targetsDefined}}" STREQUAL "${{_expectedTargets}}")
      set(CMAKE_IMPORT_FILE_VERSION)
      cmake_policy(POP)
      return()
    endif()
    if(NOT "${{_targetsDefined}}" STREQUAL "")
      message(FATAL_ERROR "Some (but not all) targets in this export set were already defined.\\nTargets Defined: ${{_targetsDefined}}\\nTargets not yet defined: ${{_targetsNotDefined}}\\n")
    endif()
    unset(_targetsDefined)
    unset(_targetsNotDefined)
    unset(_expectedTargets)
    """)

FILE_CHECK_LOOP = textwrap.dedent("""\
    # Loop over all imported files and verify that they actually exist
    foreach(target ${_IMPORT_CHECK_TARGETS} )
      foreach(file ${_IMPORT_CHECK_FILES_FOR_${target}} )
        if(NOT EXISTS "${file}" )
          message(FATAL_ERROR "The imported target \\"${target}\\" references the file
       \\"${file}\\"
    but this file does not exist.  Possible reasons include:
    * The file was deleted, renamed, or moved to another location.
    * An install or uninstall procedure did not complete successfully.
    * The installation package was faulty and contained
       \\"${CMAKE_CURRENT_LIST_FILE}\\"
    but not all the files it references.
    ")
        endif()
      endforeach()
      unset(_IMPORT_CHECK_FILES_FOR_${target})
    endforeach()
    unset(_IMPORT_CHECK_TARGETS)
    """).splitlines()


def header(config: str | None = None, *, main: bool = False) -> list[str]:
    lines: list[str] = []
    if main:
        lines.append("# Generated CMake target import file.")
        lines.append("")
        lines.extend(POLICY_PREAMBLE)
        lines.append("")
    title = "# Generated CMake target import file"
    if config is not None:
        title += f' for configuration "{config}".'
    else:
        title += "."
    lines.extend([RULE, title, RULE, ""])
    lines.extend(
        [
            "# Commands may need to know the format version.",
            "set(CMAKE_IMPORT_FILE_VERSION 1)",
            "",
        ]
    )
    return lines


def footer(*, main: bool = False) -> list[str]:
    lines = [
        "# Commands beyond this point should not need to know the version.",
        "set(CMAKE_IMPORT_FILE_VERSION)",
    ]
    if main:
        lines.append("cmake_policy(POP)")
    return lines


def expected_targets(names: Iterable[str]) -> list[str]:
    return [*EXPECTED_TARGETS_TEMPLATE.format(names=" ".join(names)).splitlines(), ""]


def import_target(name: str, artifact: Artifact, platform: Platform) -> list[str]:
    """Declaration of one imported target and its packaging markers."""
    lines = [f"# Create imported target {name}"]
    if artifact.type == "executable":
        lines.append(f"add_executable({name} IMPORTED)")
        if artifact.enable_exports:
            lines.append(f"set_property(TARGET {name} PROPERTY ENABLE_EXPORTS 1)")
    else:
        lines.append(f"add_library({name} {ARTIFACT_TYPE_KEYWORD[artifact.type]} IMPORTED)")
    if artifact.is_framework_on(platform):
        lines.append(f"set_property(TARGET {name} PROPERTY FRAMEWORK 1)")
    elif artifact.is_cf_bundle_on(platform):
        lines.append(f"set_property(TARGET {name} PROPERTY BUNDLE 1)")
    elif artifact.is_app_bundle_on(platform):
        lines.append(f"set_property(TARGET {name} PROPERTY MACOSX_BUNDLE 1)")
    lines.append("")
    return lines


def set_target_properties(name: str, properties: Mapping[str, str]) -> list[str]:
    lines = [f"set_target_properties({name} PROPERTIES"]
    for key, value in properties.items():
        lines.append(f'  {key} "{value}"')
    lines.append(")")
    return lines


def interface_properties(name: str, properties: Mapping[str, str]) -> list[str]:
    if not properties:
        return []
    return [*set_target_properties(name, properties), ""]


def config_loader(glob: str) -> list[str]:
    return [
        "# Load information for each installed configuration.",
        'get_filename_component(_DIR "${CMAKE_CURRENT_LIST_FILE}" PATH)',
        f'file(GLOB CONFIG_FILES "${{_DIR}}/{glob}")',
        "foreach(f ${CONFIG_FILES})",
        "  include(${f})",
        "endforeach()",
        "",
    ]


def import_properties(name: str, config_name: str, properties: Mapping[str, str]) -> list[str]:
    """Per-configuration property block of one imported target."""
    return [
        f'# Import target "{name}" for configuration "{config_name}"',
        f"set_property(TARGET {name} APPEND PROPERTY IMPORTED_CONFIGURATIONS {config_name})",
        *set_target_properties(name, properties),
        "",
    ]


def file_checks(
    name: str,
    properties: Mapping[str, str],
    imported_locations: Iterable[str],
) -> list[str]:
    files = "".join(f'"{properties[key]}" ' for key in sorted(imported_locations))
    return [
        f"list(APPEND _IMPORT_CHECK_TARGETS {name} )",
        f"list(APPEND _IMPORT_CHECK_FILES_FOR_{name} {files})",
        "",
    ]


def import_prefix_cleanup() -> list[str]:
    return ["# Cleanup temporary variables.", "set(_IMPORT_PREFIX)", ""]


def missing_targets_check(missing: Iterable[str]) -> list[str]:
    names = list(dict.fromkeys(missing))
    if not names:
        return []
    lines = [
        "# Make sure the targets which have been exported in some other ",
        "# export set exist.",
    ]
    for name in names:
        lines.extend(
            [
                f'if(NOT TARGET "{name}" )',
                "  if(CMAKE_FIND_PACKAGE_NAME)",
                "    set( ${CMAKE_FIND_PACKAGE_NAME}_FOUND FALSE)",
                "    set( ${CMAKE_FIND_PACKAGE_NAME}_NOT_FOUND_MESSAGE "
                f'"Required imported target \\"{name}\\" not found ! ")',
                "  else()",
                f'    message(FATAL_ERROR "Required imported target \\"{name}\\" not found ! ")',
                "  endif()",
                "endif()",
            ]
        )
    lines.append("")
    return lines


def render(lines: Iterable[str]) -> str:
    return "\n".join(lines) + "\n"
