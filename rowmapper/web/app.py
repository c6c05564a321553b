# Interactive page: streamlit run rowmapper/web/app.py
#
# - Upload template, source and mapping configuration
# - Output name field (extension follows the template, or generatedFileName)
# - Preview of the configured source sheets
# - Generate -> spinner -> download button, inputs reset for the next run
# - First failure shown in the error region; the page never crashes

from __future__ import annotations

import streamlit as st

from rowmapper.config.loader import parse_config
from rowmapper.errors import MappingError
from rowmapper.excel.reader import read_sheet_preview
from rowmapper.models.config_models import MappingConfig
from rowmapper.services.emitter import MIME_TYPES
from rowmapper.services.orchestrator import generate_bytes
from rowmapper.services.summary import render_summary_line
from rowmapper.web.state import OutputNameField, collect_inputs, output_name_field

PREVIEW_ROWS = 5

st.set_page_config(page_title="Row Mapper", page_icon="📄", layout="centered")
st.title("📄 Row Mapper")
st.caption("One cloned template sheet per source row, driven by a YAML mapping file.")

# session defaults; bumping form_key gives every widget a fresh key (= reset)
st.session_state.setdefault("form_key", 0)
st.session_state.setdefault("error", None)
st.session_state.setdefault("generated", None)
form_key = st.session_state["form_key"]

# =========================
# Inputs
# =========================
template_file = st.file_uploader(
    "Template workbook",
    type=["xlsx", "xlsm"],
    key=f"template-{form_key}",
    help="Workbook containing the model sheet named by modelSheetName.",
)
source_file = st.file_uploader(
    "Source workbook",
    type=["xlsx", "xlsm"],
    key=f"source-{form_key}",
    help="Workbook holding one sheet per configured source sheet name.",
)
config_file = st.file_uploader(
    "Mapping configuration",
    type=["yml", "yaml"],
    key=f"config-{form_key}",
)

config: MappingConfig | None = None
if config_file is not None:
    try:
        config = parse_config(config_file.getvalue().decode("utf-8"))
    except UnicodeDecodeError as e:
        st.error(f"Mapping configuration: not UTF-8 text ({e})")
    except MappingError as e:
        st.error(f"Mapping configuration: {e}")

try:
    field = output_name_field(config, template_file.name if template_file is not None else None)
except MappingError as e:
    st.error(f"Template workbook: {e}")
    field = OutputNameField(value="", extension="xlsx", disabled=False)

name_col, ext_col = st.columns([5, 1])
output_stem = name_col.text_input(
    "Generated file name",
    value=field.value,
    disabled=field.disabled,
    key=f"output-{form_key}-{field.value}-{field.disabled}",
)
ext_col.markdown(f"<br>**.{field.extension}**", unsafe_allow_html=True)

if source_file is not None and config is not None:
    with st.expander("Source preview", expanded=False):
        for spec in config.sheets:
            st.markdown(f"**{spec.source_sheet_name}** from row {spec.start_row}")
            try:
                st.dataframe(
                    read_sheet_preview(
                        source_file.getvalue(), spec.source_sheet_name, start_row=spec.start_row, rows=PREVIEW_ROWS
                    ),
                    use_container_width=True,
                )
            except MappingError as e:
                st.warning(str(e))

error_region = st.empty()

# =========================
# Generation
# =========================
if st.button("Generate", type="primary", use_container_width=True):
    st.session_state["error"] = None
    st.session_state["generated"] = None
    try:
        inputs = collect_inputs(
            template=template_file.getvalue() if template_file is not None else None,
            source=source_file.getvalue() if source_file is not None else None,
            config=config,
            output_stem=output_stem,
            extension=field.extension,
        )
    except MappingError as e:
        st.session_state["error"] = e.to_record().describe()
    else:
        with st.spinner("Generating sheets…"):
            result, payload = generate_bytes(inputs)
        if result.error is not None or payload is None:
            st.session_state["error"] = result.error.describe() if result.error else "generation failed"
        else:
            st.session_state["generated"] = (inputs.output_name, payload, render_summary_line(result))
            st.session_state["form_key"] = form_key + 1
            st.rerun()

if st.session_state["error"]:
    error_region.error(f"Error : {st.session_state['error']}")

if st.session_state["generated"] is not None:
    name, payload, summary = st.session_state["generated"]
    extension = name.rsplit(".", 1)[-1].lower() if "." in name else "xlsx"
    st.success(f"Workbook generated ✅  ({summary})")
    st.download_button(
        label=f"⬇️ Download {name}",
        data=payload,
        file_name=name,
        mime=MIME_TYPES.get(extension, MIME_TYPES["xlsx"]),
        use_container_width=True,
    )
