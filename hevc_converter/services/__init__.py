"""
Services Package for the HEVC converter.

This package contains the "service layer" of the application. A service is a
class that performs one high-level task and bridges the batch pipeline (the
"when" of processing) with the domain models and external tools (the "what" and
"with what").

- **Converter (`conversion_service.py`):**
  Transcodes one MP4 into an HEVC MKV, copies the modification date and hands
  the pair to the post-conversion gate.

- **Validators (`validation_service.py`):**
  Codec, duration and SSIM/PSNR checks, and the `ConversionValidator` that
  chains them after every conversion.

- **Logging Service (`logging_service.py`):**
  Console logger configuration, plus the YAML success report and the plain
  text error log that are kept apart from the console output.
"""
