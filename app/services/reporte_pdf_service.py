"""Reporte PDF de inasistencias de un alumno (reportlab)."""
from datetime import datetime, timedelta, timezone
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import (
    KeepTogether,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

# ── Paleta ───────────────────────────────────────────────────────────
AZUL_ESCUELA = colors.HexColor("#1E3A5F")
TEXTO_SECUNDARIO = colors.HexColor("#64748B")
FONDO_ALTERNO = colors.HexColor("#F1F5F9")
BORDE = colors.HexColor("#CBD5E1")

EVENTO_COLORES = {
    "Inasistencia": colors.HexColor("#DC2626"),
    "Tardanza": colors.HexColor("#D97706"),
    "Retiro": colors.HexColor("#EA580C"),
    "Asistencia": colors.HexColor("#16A34A"),
}

# Hora de Argentina para la fecha de generación
HORA_ARGENTINA = timezone(timedelta(hours=-3))

MARGEN_LATERAL = 2 * cm
MARGEN_INFERIOR = 1.5 * cm
# el encabezado se dibuja sobre el canvas, dentro del margen superior
MARGEN_SUPERIOR = 3.5 * cm

TITULO = "Reporte de Inasistencias"
INSTITUCION = "GESTIÓN ESCOLAR · REGISTRO DE ASISTENCIAS"

_base = getSampleStyleSheet()
ESTILOS = {
    "subtitulo": ParagraphStyle(
        "Subtitulo", parent=_base["Normal"], fontSize=11, leading=15, textColor=AZUL_ESCUELA
    ),
    "generado": ParagraphStyle(
        "Generado", parent=_base["Normal"], fontSize=8, leading=12, textColor=TEXTO_SECUNDARIO
    ),
    "seccion": ParagraphStyle(
        "Seccion",
        parent=_base["Heading3"],
        textColor=AZUL_ESCUELA,
        spaceBefore=4,
        spaceAfter=8,
    ),
    "vacio": ParagraphStyle(
        "Vacio", parent=_base["Italic"], fontSize=9, textColor=TEXTO_SECUNDARIO
    ),
}

_ESTILO_TABLA = [
    ("BACKGROUND", (0, 0), (-1, 0), AZUL_ESCUELA),
    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
    ("FONTSIZE", (0, 0), (-1, -1), 8.5),
    ("TOPPADDING", (0, 0), (-1, -1), 5),
    ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
    ("LINEBELOW", (0, 0), (-1, -1), 0.4, BORDE),
    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
]


def _encabezado_y_pie(alumno_nombre: str):
    """Dibuja en cada página la institución, el título, el alumno y el número de página."""

    def dibujar(canvas, doc):
        ancho, alto = A4
        izquierda, derecha = MARGEN_LATERAL, ancho - MARGEN_LATERAL
        linea_y = alto - 1.9 * cm
        canvas.saveState()
        canvas.setFillColor(AZUL_ESCUELA)
        canvas.setFont("Helvetica-Bold", 7.5)
        canvas.drawString(izquierda, alto - 1.2 * cm, INSTITUCION)
        canvas.setFont("Helvetica-Bold", 14)
        canvas.drawRightString(derecha, alto - 1.6 * cm, TITULO)
        canvas.setStrokeColor(AZUL_ESCUELA)
        canvas.setLineWidth(1.2)
        canvas.line(izquierda, linea_y, derecha, linea_y)
        canvas.setFont("Helvetica", 7.5)
        canvas.setFillColor(TEXTO_SECUNDARIO)
        canvas.drawString(izquierda, 0.8 * cm, alumno_nombre)
        canvas.drawRightString(derecha, 0.8 * cm, f"Página {doc.page}")
        canvas.restoreState()

    return dibujar


def _tabla(filas: list[list], anchos: list[float], estilo_extra=()) -> Table:
    """Tabla con la primera fila como encabezado y filas alternadas sombreadas."""
    tabla = Table(filas, colWidths=anchos, repeatRows=1)
    alternas = [("BACKGROUND", (0, i), (-1, i), FONDO_ALTERNO) for i in range(2, len(filas), 2)]
    tabla.setStyle(TableStyle(_ESTILO_TABLA + alternas + list(estilo_extra)))
    return tabla


def _bloque(titulo: str, tabla: Table) -> KeepTogether:
    return KeepTogether([Paragraph(titulo, ESTILOS["seccion"]), tabla, Spacer(1, 0.4 * cm)])


def generar_inasistencias_alumno(alumno: dict, resumen: dict, registros: list[dict]) -> bytes:
    """Reporte de inasistencias del año: datos del alumno, totales ponderados y detalle.

    ``alumno``: nombre, dni, legajo, curso. ``resumen``: acumulado, justificadas y
    conteo por tipo. ``registros``: fecha, tipo_evento, hora_registro, justificacion, observaciones.
    """
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        title=TITULO,
        topMargin=MARGEN_SUPERIOR,
        bottomMargin=MARGEN_INFERIOR,
        leftMargin=MARGEN_LATERAL,
        rightMargin=MARGEN_LATERAL,
    )
    nombre = alumno.get("nombre", "")
    generado = datetime.now(HORA_ARGENTINA).strftime("%d/%m/%Y %H:%M")
    elementos = [
        Paragraph(f"{nombre} · {alumno.get('curso', '')}", ESTILOS["subtitulo"]),
        Paragraph(f"Generado el {generado}", ESTILOS["generado"]),
        Spacer(1, 0.5 * cm),
    ]

    elementos.append(_bloque("Datos del alumno", _tabla(
        [
            ["Campo", "Valor"],
            ["Alumno", nombre],
            ["DNI", alumno.get("dni") or "-"],
            ["Legajo", alumno.get("legajo") or "-"],
            ["Curso", alumno.get("curso", "")],
        ],
        anchos=[5 * cm, 12 * cm],
    )))

    conteo = resumen.get("conteo", {})
    acumulado = resumen.get("acumulado", 0)
    justificadas = resumen.get("justificadas", 0)
    elementos.append(_bloque("Resumen del año", _tabla(
        [
            ["Indicador", "Valor"],
            ["Inasistencias", str(conteo.get("Inasistencia", 0))],
            ["Tardanzas", str(conteo.get("Tardanza", 0))],
            ["Retiros", str(conteo.get("Retiro", 0))],
            ["Total ponderado", f"{acumulado:.2f}"],
            ["Justificadas (ponderado)", f"{justificadas:.2f}"],
            ["Sin justificar (ponderado)", f"{acumulado - justificadas:.2f}"],
        ],
        anchos=[9 * cm, 8 * cm],
        estilo_extra=[("FONTNAME", (0, 4), (-1, 4), "Helvetica-Bold")],
    )))

    elementos.append(Paragraph("Detalle", ESTILOS["seccion"]))
    if not registros:
        elementos.append(Paragraph("No hay registros en el año en curso.", ESTILOS["vacio"]))
    else:
        filas = [["Fecha", "Evento", "Hora", "Justificación", "Observaciones"]]
        filas += [
            [
                r.get("fecha", ""),
                r.get("tipo_evento", ""),
                r.get("hora_registro") or "-",
                r.get("justificacion") or "-",
                r.get("observaciones") or "",
            ]
            for r in registros
        ]
        colores = [
            ("TEXTCOLOR", (1, i), (1, i), EVENTO_COLORES[fila[1]])
            for i, fila in enumerate(filas[1:], start=1)
            if fila[1] in EVENTO_COLORES
        ]
        elementos.append(_tabla(
            filas,
            anchos=[2.4 * cm, 2.6 * cm, 1.8 * cm, 2.8 * cm, 7.4 * cm],
            estilo_extra=colores,
        ))

    pagina = _encabezado_y_pie(nombre)
    doc.build(elementos, onFirstPage=pagina, onLaterPages=pagina)
    return buf.getvalue()
