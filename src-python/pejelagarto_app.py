# pejelagarto_app.py
# Pejelagarto - Gradio UI (Human <-> Pejelagarto)

import argparse
import logging

import gradio as gr
import pejelagarto as pj

logger = logging.getLogger(__name__)


CSS = """
<style>
#title { margin-bottom: 0.25rem; }
.small { opacity: 0.90; font-size: 0.92rem; }
</style>
"""

ABOUT_MD = r"""
## About Pejelagarto

Pejelagarto is a **reversible text codec**: any Human text can be turned into
Pejelagarto and back without loss. It is **not a cipher**, there is no key.

Encoding applies, in order:

- **Numbers**: positive decimal runs become base 8, negative runs base 7 (leading zeros kept).
- **Punctuation**: `?` → `‽`, `!` → `¡`, `.` → `..`, `,` → `،`, `-` → `‐` and so on.
- **Letters and short words**: `hello` → `'araka`, `the` → `'ele`, `a` ↔ `u`, `e` ↔ `w` ...
  A leading `'` marks a multi-letter replacement; a literal `'` is protected by a soft hyphen.
- **Accents**: vowels picked by the prime factors of the text length get their accent rotated.
- **Case flip**: letters at Fibonacci (odd word count) or Tribonacci (even word count) positions swap case.
- **Invisible timestamp**: five invisible code points carry the date and time (UTC, minute precision).

Decoding restores the original text and appends the recovered timestamp as a last line
(`YYYY-MM-DDTHH:MM:00Z`). If the input already ends with an ISO-8601 line, that instant
is embedded instead of the current time. Use **Strip timestamp** to drop the invisible
characters before decoding.
"""


def do_encode(text_in: str):
    try:
        out = pj.to_pejelagarto(text_in or "")
        return out, f"Encoded ({len(text_in or '')} → {len(out)} code points)."
    except Exception as e:
        return "", f"Error: {e}"


def do_decode(text_in: str):
    try:
        stamp = pj.read_invisible_timestamp(text_in or "")
        out = pj.from_pejelagarto(text_in or "")
        if stamp:
            return out, f"Decoded. Timestamp: {stamp}"
        return out, "Decoded. (No invisible timestamp found)"
    except Exception as e:
        return "", f"Error: {e}"


def do_strip(text_in: str):
    try:
        out = pj.strip_invisible_timestamp(text_in or "")
        removed = len(text_in or "") - len(out)
        return out, f"Removed {removed} invisible timestamp character(s)."
    except Exception as e:
        return "", f"Error: {e}"


def do_swap(text_in: str, text_out: str):
    return text_out, text_in, "Swapped."


def build_app():
    with gr.Blocks(title="Pejelagarto — Gradio Demo") as demo:
        gr.HTML(CSS)

        gr.Markdown("# Pejelagarto — Human ↔ Pejelagarto", elem_id="title")
        gr.Markdown(
            "**Pejelagarto** rewrites letters, punctuation, numbers, accents and case in a fully reversible way, "
            "and hides the time of writing in five invisible characters.",
            elem_classes=["small"],
        )

        with gr.Tabs():
            with gr.TabItem("Demo"):
                text_in = gr.Textbox(
                    label="Input (Human or Pejelagarto)",
                    lines=4,
                    value="Hello, the leg of Fran is 42 cm long!",
                )

                with gr.Row():
                    btn_enc = gr.Button("Encode")
                    btn_dec = gr.Button("Decode")
                    btn_strip = gr.Button("Strip timestamp")
                    btn_swap = gr.Button("Swap ↔")

                text_out = gr.Textbox(label="Output", lines=4)
                status = gr.Markdown("Tip: Encode and Decode both read from Input and write to Output.")

                btn_enc.click(do_encode, inputs=[text_in], outputs=[text_out, status])
                btn_dec.click(do_decode, inputs=[text_in], outputs=[text_out, status])
                btn_strip.click(do_strip, inputs=[text_in], outputs=[text_out, status])
                btn_swap.click(
                    do_swap,
                    inputs=[text_in, text_out],
                    outputs=[text_in, text_out, status],
                )

            with gr.TabItem("About"):
                gr.Markdown(ABOUT_MD)

    return demo


def main(argv=None):
    parser = argparse.ArgumentParser(description="Pejelagarto Gradio demo")
    parser.add_argument("--host", default=None, help="Interface to bind (Gradio default when omitted)")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    parser.add_argument("--share", action="store_true", help="Create a public Gradio share link")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    logger.info("launching Pejelagarto demo (host=%s, port=%s, share=%s)", args.host, args.port, args.share)
    app = build_app()
    app.launch(server_name=args.host, server_port=args.port, share=args.share)


if __name__ == "__main__":
    main()
