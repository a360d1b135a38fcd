#! /usr/bin/python3
# -*- coding: utf-8 -*-
##################################################################################################
# Copyright (c) 2025 Mikio Hirabayashi
#
# Permission is hereby granted, free of charge, to any person obtaining a copy of this software
# and associated documentation files (the "Software"), to deal in the Software without
# restriction, including without limitation the rights to use, copy, modify, merge, publish,
# distribute, sublicense, and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all copies or
# substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR IMPLIED, INCLUDING
# BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM,
# DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE SOFTWARE.
##################################################################################################


import argparse
import ctypes
import importlib.util
import logging
import io
import math
import os
import re
import shutil
import subprocess
import sys
import time
from concurrent.futures import ThreadPoolExecutor

os.environ.setdefault("OPENCV_IO_ENABLE_OPENEXR", "1")

import cv2
import exifread
import numpy as np
from PIL import Image, ImageCms


PROG_NAME = "one_denoiser.py"
PROG_VERSION = "0.0.1"
CMD_EXIFTOOL = "exiftool"
EXTS_IMAGE_HDR = [".exr", ".hdr", ".pfm"]
EXTS_IMAGE_NO_ALPHA = [".hdr", ".pfm"]
EXTS_EXIFTOOL = [".jpg", ".jpeg", ".png", ".tiff", ".tif", ".webp", ".jp2"]
EXTS_EXIFREAD = [".jpg", ".jpeg", ".tiff", ".tif"]
EXTS_EXIFTOOL_ICC_READ = [".jpg", ".jpeg", ".png", ".tiff", ".tif", ".webp", ".jp2"]
EXTS_EXIFTOOL_ICC_WRITE = EXTS_EXIFTOOL_ICC_READ[:]
EXTS_PILLOW_ICC_READ = [".jpg", ".jpeg", ".png", ".tiff", ".tif"]
FORMAT_TAGS = {
  np.dtype(np.uint8): "uint8",
  np.dtype(np.uint16): "uint16",
  np.dtype(np.uint32): "uint32",
  np.dtype(np.int8): "int8",
  np.dtype(np.int16): "int16",
  np.dtype(np.int32): "int32",
  np.dtype(np.float16): "half",
  np.dtype(np.float32): "float",
  np.dtype(np.float64): "double",
}
FLOAT_FORMATS = ["half", "float", "double"]
ICC_SRGB_CURVES = ["srgb", "display_p3"]
MIN_CHUNK_SAMPLES = 1 << 16


logging.basicConfig(format="%(message)s", stream=sys.stderr)
logger = logging.getLogger(PROG_NAME)
logger.setLevel(logging.INFO)
cmd_env = os.environ
cmd_env["PATH"] = cmd_env.get("PATH", "") + ":/opt/homebrew/bin"
cmd_env["PATH"] = cmd_env["PATH"] + ":/usr/local/bin"
cv2.setLogLevel(0)


class UsageError(ValueError):
  """Raised when the command line asks for something unavailable."""


def has_command(name):
  """Checks existence of a command."""
  return bool(shutil.which(name))


def srgb_to_linear(value):
  """Converts sRGB gamma into linear RGB.

  A scalar gives a scalar and an array gives an array of the same shape. Float arrays keep
  their dtype and other arrays are promoted to float32.
  Values outside [0, 1] are converted as they are, without clamping.
  """
  if np.isscalar(value):
    if value < 0.04045:
      return value / 12.92
    return ((value + 0.055) / 1.055) ** 2.4
  value = np.asarray(value)
  if not np.issubdtype(value.dtype, np.floating):
    value = value.astype(np.float32)
  with np.errstate(invalid="ignore"):
    return np.where(value < 0.04045, value / 12.92,
                    np.power((value + 0.055) / 1.055, 2.4)).astype(value.dtype, copy=False)


def linear_to_srgb(value):
  """Converts linear RGB into sRGB gamma.

  A scalar gives a scalar and an array gives an array of the same shape. Float arrays keep
  their dtype and other arrays are promoted to float32.
  Values outside [0, 1] are converted as they are, without clamping.
  """
  if np.isscalar(value):
    if value < 0.0031308:
      return value * 12.92
    return 1.055 * value ** (1.0 / 2.4) - 0.055
  value = np.asarray(value)
  if not np.issubdtype(value.dtype, np.floating):
    value = value.astype(np.float32)
  with np.errstate(invalid="ignore"):
    return np.where(value < 0.0031308, value * 12.92,
                    1.055 * np.power(value, 1.0 / 2.4) - 0.055).astype(value.dtype, copy=False)


def resolve_num_threads(num_threads):
  """Resolves the number of worker threads, where zero or less means all CPUs."""
  if num_threads is None or num_threads <= 0:
    return os.cpu_count() or 1
  return num_threads


def convert_buffer(buffer, func, num_threads=0):
  """Applies a transfer function to every sample of a buffer in parallel."""
  buffer = np.asarray(buffer, dtype=np.float32)
  flat = buffer.reshape(-1)
  num_threads = resolve_num_threads(num_threads)
  num_chunks = max(1, min(num_threads, flat.size // MIN_CHUNK_SAMPLES))
  if num_chunks < 2:
    converted = func(flat)
  else:
    chunks = np.array_split(flat, num_chunks)
    with ThreadPoolExecutor(max_workers=num_chunks) as executor:
      converted = np.concatenate(list(executor.map(func, chunks)))
  assert converted.size == flat.size
  return np.asarray(converted, dtype=np.float32).reshape(buffer.shape)


def get_format_tag(image):
  """Gets the storage format tag of a decoded image."""
  tag = FORMAT_TAGS.get(image.dtype)
  if not tag:
    raise ValueError(f"Unsupported sample type: {image.dtype}")
  return tag


def normalize_input_image(image):
  """Normalizes a decoded image as float samples with a channel axis."""
  if np.issubdtype(image.dtype, np.integer):
    image = image.astype(np.float32) / float(np.iinfo(image.dtype).max)
  else:
    image = image.astype(np.float32)
  if image.ndim == 2:
    image = image[:, :, np.newaxis]
  return image


def check_icc_profile_name(file_path, default="srgb", meta=None):
  """Checks the name of the ICC profile of the image."""
  ext = os.path.splitext(file_path)[1].lower()
  desc = ""
  if ext in EXTS_PILLOW_ICC_READ:
    try:
      with Image.open(file_path) as img:
        icc_bytes = img.info.get("icc_profile", None)
        if icc_bytes:
          profile = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
          desc = ImageCms.getProfileDescription(profile)
    except Exception:
      pass
  if not desc and meta:
    desc = meta.get("_icc_", "")
  desc = desc.strip().lower()
  name = default
  if "prophoto" in desc:
    name = "prophoto_rgb"
  elif "adobe" in desc:
    name = "adobe_rgb"
  elif "display p3" in desc or "displayp3" in desc:
    name = "display_p3"
  elif "2020" in desc:
    name = "bt2020"
  elif "srgb" in desc:
    name = "srgb"
  return name


def load_image(file_path, num_threads=0, meta=None):
  """Loads an image and returns its linear RGB data as a NumPy array with the format tag."""
  logger.debug(f"loading image: {file_path}")
  image = cv2.imread(file_path, cv2.IMREAD_UNCHANGED)
  if image is None:
    raise IOError(f"Failed to load image: {file_path}")
  fmt = get_format_tag(image)
  image = normalize_input_image(image)
  if fmt not in FLOAT_FORMATS:
    image = convert_buffer(image, srgb_to_linear, num_threads)
    icc_name = check_icc_profile_name(file_path, "srgb", meta)
    if icc_name not in ICC_SRGB_CURVES:
      logger.warning(f"Decoding {file_path} as sRGB though its ICC profile is {icc_name}")
  h, w, c = image.shape
  logger.debug(f"input image: h={h}, w={w}, channels={c}, format={fmt}")
  return image, fmt


def save_image(file_path, image, num_threads=0):
  """Saves an image after converting it from linear RGB to the output encoding."""
  assert image.dtype == np.float32
  logger.debug(f"saving image: {file_path}")
  if not cv2.haveImageWriter(file_path):
    logger.warning(f"No image writer for the output: {file_path}")
    return False
  ext = os.path.splitext(file_path)[1].lower()
  if ext in EXTS_IMAGE_HDR:
    output = image
  else:
    output = convert_buffer(image, linear_to_srgb, num_threads)
    output = np.round(np.clip(output, 0, 1) * ((1<<8) - 1)).astype(np.uint8)
  if ext in EXTS_IMAGE_NO_ALPHA and output.shape[2] == 4:
    logger.debug(f"dropping the alpha channel for {ext}")
    output = np.ascontiguousarray(output[:, :, :3])
  if output.ndim == 3 and output.shape[2] == 1:
    output = output[:, :, 0]
  success = cv2.imwrite(file_path, output)
  if not success:
    raise IOError(f"Failed to save image: {file_path}")
  return True


def parse_boolean(text):
  """Parse a boolean expression and get its boolean value."""
  value = text.strip().lower()
  if value in ["true", "t", "1", "yes", "y"]:
    return True
  if value in ["false", "f", "0", "no", "n"]:
    return False
  raise ValueError(f"invalid boolean expression '{text}'")


def get_metadata(path):
  """Gets the color space name from Exif data of a image file."""
  meta = {}
  ext = os.path.splitext(path)[1].lower()
  if has_command(CMD_EXIFTOOL) and ext in EXTS_EXIFTOOL:
    cmd = [CMD_EXIFTOOL, "-s", "-t", "-n", path]
    logger.debug(f"running: {' '.join(cmd)}")
    try:
      content = subprocess.check_output(
        cmd, stdin=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except subprocess.CalledProcessError:
      content = b""
    lines = content.decode("utf-8", "ignore").split("\n")
    for line in lines:
      fields = line.strip().split("\t", 1)
      if len(fields) < 2: continue
      name, value = fields[:2]
      if name == "ProfileDescription":
        meta["_icc_"] = value
      if name == "ICCProfileName":
        meta["_icc_"] = value
  if not meta and ext in EXTS_EXIFREAD:
    try:
      with open(path, "rb") as f:
        tags = exifread.process_file(f, details=False)
    except Exception:
      tags = {}
    for name, value in tags.items():
      value = str(value)
      if name == "EXIF ColorSpace":
        if "srgb" in value.lower():
          meta.setdefault("_icc_", "sRGB")
        elif "adobe" in value.lower():
          meta["_icc_"] = "Adobe RGB"
      if name == "Interoperability InteroperabilityIndex" and value.strip() == "R03":
        meta["_icc_"] = "Adobe RGB"
  return meta


def copy_metadata(source_path, target_path):
  """Copies EXIF data from source image to target image."""
  source_ext = os.path.splitext(source_path)[1].lower()
  target_ext = os.path.splitext(target_path)[1].lower()
  if has_command(CMD_EXIFTOOL) and source_ext in EXTS_EXIFTOOL and target_ext in EXTS_EXIFTOOL:
    logger.info(f"Copying metadata")
    cmd = [CMD_EXIFTOOL, "-TagsFromFile", source_path,
           "-thumbnailimage=", "-f", "-m", "-overwrite_original", target_path]
    logger.debug(f"running: {' '.join(cmd)}")
    try:
      subprocess.run(cmd, check=True, stdin=subprocess.DEVNULL,
                     stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except subprocess.CalledProcessError as e:
      logger.debug(f"metadata copy failed: {e}")


def copy_icc_profile(source_path, target_path):
  """Copies ICC profile from source image to target image."""
  source_ext = os.path.splitext(source_path)[1].lower()
  target_ext = os.path.splitext(target_path)[1].lower()
  if (has_command(CMD_EXIFTOOL) and
      source_ext in EXTS_EXIFTOOL_ICC_READ and target_ext in EXTS_EXIFTOOL_ICC_WRITE):
    logger.info(f"Copying ICC profile")
    cmd = [CMD_EXIFTOOL, "-TagsFromFile", source_path,
           "-icc_profile", "-f", "-m", "-overwrite_original", target_path]
    logger.debug(f"running: {' '.join(cmd)}")
    try:
      subprocess.run(cmd, check=True, stdin=subprocess.DEVNULL,
                     stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except subprocess.CalledProcessError as e:
      logger.debug(f"ICC profile copy failed: {e}")


def fix_overflown_image(image):
  """Replaces NaN and -inf with 0, and inf with 1."""
  assert image.dtype == np.float32
  return np.clip(np.nan_to_num(image, nan=0.0, posinf=1.0, neginf=0.0), 0, None)


def log_image_stats(image, prefix):
  """prints logs of an image."""
  assert image.dtype == np.float32
  has_nan = np.isnan(image).any()
  if has_nan:
    image = fix_overflown_image(image)
  minv = np.min(image)
  maxv = np.max(image)
  mean = np.mean(image)
  stddev = np.std(image)
  p99 = np.percentile(image, 99)
  logger.debug(f"{prefix} stats: min={minv:.3f}, max={maxv:.3f}, mean={mean:.3f},"
               f" stddev={stddev:.3f}, p99={p99:.3f}, nan={has_nan}")


def to_rgb_buffer(image):
  """Makes a contiguous RGB buffer of three channels and the alpha channel if any."""
  assert image.dtype == np.float32
  channels = image.shape[2]
  if channels == 1:
    return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2RGB), None
  if channels == 3:
    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB), None
  if channels == 4:
    rgb = cv2.cvtColor(np.ascontiguousarray(image[:, :, :3]), cv2.COLOR_BGR2RGB)
    return rgb, image[:, :, 3:4]
  raise ValueError(f"Unsupported number of channels: {channels}")


def from_rgb_buffer(rgb, channels, alpha=None):
  """Restores the channel layout of an input image from an RGB buffer."""
  assert rgb.dtype == np.float32
  if channels == 1:
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2GRAY)[:, :, np.newaxis]
  bgr = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
  if alpha is not None:
    return np.dstack((bgr, alpha))
  return bgr


def set_oidn_filter_bool(oidn, oidn_filter, name, value):
  """Sets a bool parameter of an OIDN filter by the C function of the bundled library.

  The oidn binding exposes no parameter setters, so oidnSetFilter1b is bound the way its
  own functions are bound.
  """
  lib = getattr(oidn, "__lib_oidn")
  func = lib.oidnSetFilter1b
  func.restype = None
  func.argtypes = [ctypes.c_void_p, ctypes.c_char_p, ctypes.c_bool]
  func(oidn_filter, bytes(name, "ascii"), bool(value))


def denoise_oidn(color, albedo=None, normal=None, hdr=False, clean_aux=False):
  """Denoises an image by the ray tracing filter of Intel Open Image Denoise."""
  import oidn
  height, width = color.shape[:2]
  color = np.ascontiguousarray(color, dtype=np.float32)
  result = np.zeros_like(color)
  device = oidn.NewDevice()
  oidn.CommitDevice(device)
  oidn_filter = oidn.NewFilter(device, "RT")
  try:
    oidn.SetSharedFilterImage(oidn_filter, "color", color, oidn.FORMAT_FLOAT3, width, height)
    if albedo is not None:
      albedo = np.ascontiguousarray(albedo, dtype=np.float32)
      oidn.SetSharedFilterImage(oidn_filter, "albedo", albedo, oidn.FORMAT_FLOAT3, width, height)
      if normal is not None:
        normal = np.ascontiguousarray(normal, dtype=np.float32)
        oidn.SetSharedFilterImage(oidn_filter, "normal", normal, oidn.FORMAT_FLOAT3, width, height)
    elif normal is not None:
      logger.warning(f"OIDN needs the albedo to use the normal: ignored")
    oidn.SetSharedFilterImage(oidn_filter, "output", result, oidn.FORMAT_FLOAT3, width, height)
    set_oidn_filter_bool(oidn, oidn_filter, "hdr", hdr)
    set_oidn_filter_bool(oidn, oidn_filter, "cleanAux", clean_aux)
    oidn.CommitFilter(oidn_filter)
    oidn.ExecuteFilter(oidn_filter)
    error = oidn.GetDeviceError(device)
    if error != oidn.ERROR_NONE:
      raise RuntimeError(f"OpenImageDenoise failed: error={error}")
  finally:
    oidn.ReleaseFilter(oidn_filter)
    oidn.ReleaseDevice(device)
  return result


def denoise_bilateral(color, albedo=None, normal=None, hdr=False, radius=3):
  """Denoises an image by the bilateral filter, in log space for HDR data."""
  assert color.dtype == np.float32
  ksize = math.ceil(2 * radius) + 1
  sigma_color = min(0.05 * math.sqrt(ksize), 0.35)
  sigma_space = 10 * math.sqrt(ksize)
  if hdr:
    logged = np.log1p(np.maximum(color, 0))
    filtered = cv2.bilateralFilter(logged, ksize, sigma_color, sigma_space)
    return np.expm1(filtered).astype(np.float32)
  return cv2.bilateralFilter(color, ksize, sigma_color, sigma_space)


def denoise_nlmeans(color, albedo=None, normal=None, hdr=False, strength=5.0, window=21):
  """Denoises an image by non-local means on its 8-bit sRGB encoding."""
  assert color.dtype == np.float32
  if hdr and np.max(color) > 1:
    logger.warning(f"Non-local means clips HDR values into the display range")
  encoded = linear_to_srgb(np.clip(color, 0, 1))
  bgr = cv2.cvtColor(np.round(encoded * 255).astype(np.uint8), cv2.COLOR_RGB2BGR)
  denoised = cv2.fastNlMeansDenoisingColored(bgr, None, strength, strength, 7, int(window))
  rgb = cv2.cvtColor(denoised, cv2.COLOR_BGR2RGB).astype(np.float32) / 255
  return srgb_to_linear(rgb)


DENOISERS = {
  "oidn": {
    "function": denoise_oidn,
    "modules": ["oidn"],
    "aux": True,
    "options": {"hdr": parse_boolean, "clean_aux": parse_boolean},
    "description": "OpenImageDenoise",
  },
  "bilateral": {
    "function": denoise_bilateral,
    "modules": [],
    "aux": False,
    "options": {"hdr": parse_boolean, "radius": float},
    "description": "OpenCV bilateral filter",
  },
  "nlmeans": {
    "function": denoise_nlmeans,
    "modules": [],
    "aux": False,
    "options": {"hdr": parse_boolean, "strength": float, "window": int},
    "description": "OpenCV non-local means",
  },
}


def register_denoiser(name, function, modules=(), aux=False, options=None, description=""):
  """Registers a denoiser engine under the name."""
  options = dict(options or {})
  options.setdefault("hdr", parse_boolean)
  DENOISERS[name] = {
    "function": function,
    "modules": list(modules),
    "aux": aux,
    "options": options,
    "description": description or name,
  }


def is_denoiser_available(name):
  """Checks whether all modules needed by the denoiser can be imported."""
  item = DENOISERS.get(name)
  if not item:
    return False
  for module in item["modules"]:
    if importlib.util.find_spec(module) is None:
      return False
  return True


def get_denoiser(name):
  """Gets the registry entry of an available denoiser."""
  item = DENOISERS.get(name)
  if not item:
    raise UsageError(f"unknown denoiser {name}")
  if not is_denoiser_available(name):
    raise UsageError(f"{item['description']} is not enabled")
  return item


def parse_name_opts_expression(expr):
  """Parses name:option expression and returns key-value map."""
  expr = expr.strip()
  if re.match(r"^[a-zA-Z_]+:", expr):
    fields = re.split(":", expr)
  elif re.match(r"^[a-zA-Z_]+,", expr):
    fields = re.split(",", expr)
  elif re.match(r"^[a-zA-Z_]+;", expr):
    fields = re.split(";", expr)
  else:
    fields = re.split(r"[ ,\|:;]+", expr)
  params = {"name": fields[0]}
  for field in fields[1:]:
    columns = field.split("=", 1)
    name = columns[0].strip()
    if len(columns) > 1:
      params[name] = columns[1].strip()
    else:
      params[name] = "true"
  return params


def copy_param_to_kwargs(params, kwargs, name, convert_type=None):
  """Copies an option parameter into the kwargs."""
  if name in params:
    value = params[name]
    if callable(convert_type):
      value = convert_type(value)
    kwargs[name] = value


def load_aux_image(file_path, label, shape, num_threads=0):
  """Loads an auxiliary image and checks its size against the input."""
  logger.info(f"Loading the {label} file")
  image, _ = load_image(file_path, num_threads)
  if image.shape[:2] != shape[:2]:
    raise ValueError(f"Size mismatch of the {label}: {image.shape[:2]} vs {shape[:2]}")
  color, _ = to_rgb_buffer(image)
  return color


def run(denoiser_expr, input_path, output_path, albedo_path=None, normal_path=None,
        num_threads=0, keep_metadata=True):
  """Denoises the input image file and writes the output image file."""
  params = parse_name_opts_expression(denoiser_expr)
  name = params.pop("name")
  item = get_denoiser(name)
  kwargs = {}
  for option, convert_type in item["options"].items():
    try:
      copy_param_to_kwargs(params, kwargs, option, convert_type)
    except ValueError as e:
      raise UsageError(f"invalid option of {name}: {option}={params[option]}") from e
  for option in params:
    if option not in item["options"]:
      logger.warning(f"Unknown option of {name}: {option}")
  logger.info(f"Loading the input file")
  meta = get_metadata(input_path)
  if meta:
    logger.debug(f"input metadata: {meta}")
  image, fmt = load_image(input_path, num_threads, meta)
  if logger.isEnabledFor(logging.DEBUG):
    log_image_stats(image, "input")
  kwargs.setdefault("hdr", fmt in FLOAT_FORMATS)
  channels = image.shape[2]
  color, alpha = to_rgb_buffer(image)
  albedo = None
  normal = None
  if albedo_path or normal_path:
    if item["aux"]:
      if albedo_path:
        albedo = load_aux_image(albedo_path, "albedo", image.shape, num_threads)
      if normal_path:
        normal = load_aux_image(normal_path, "normal", image.shape, num_threads)
    else:
      logger.warning(f"{item['description']} ignores auxiliary images")
  logger.info(f"Denoising by {item['description']}: hdr={kwargs['hdr']}")
  result = item["function"](color, albedo, normal, **kwargs)
  result = np.asarray(result, dtype=np.float32)
  if result.shape != color.shape:
    raise ValueError(f"Denoiser output shape mismatch: {result.shape} vs {color.shape}")
  result = fix_overflown_image(result)
  if logger.isEnabledFor(logging.DEBUG):
    log_image_stats(result, "denoised")
  result = from_rgb_buffer(result, channels, alpha)
  logger.info(f"Saving the output file")
  if not save_image(output_path, result, num_threads):
    return False
  if keep_metadata:
    copy_metadata(input_path, output_path)
    copy_icc_profile(input_path, output_path)
  return True


def set_logging_level(level):
  """Sets the logging level."""
  logger.setLevel(level)


def make_ap_args():
  """Makes arguments of the argument parser."""
  description = "Easy-to-use wrapper for open source denoisers."
  version_msg = (f"{PROG_NAME} version {PROG_VERSION}."
            f" Powered by OpenCV2 {cv2.__version__} and NumPy {np.__version__}.")
  ap = argparse.ArgumentParser(
    prog=PROG_NAME, description=description, epilog=version_msg,
    formatter_class=argparse.RawDescriptionHelpFormatter, allow_abbrev=False)
  ap.add_argument("--version", action='version', version=version_msg)
  ap.add_argument("--use", default="", metavar="name",
                  help="choose a denoiser: " + ", ".join(DENOISERS.keys()) +
                  ". options follow the name like bilateral:radius=5")
  ap.add_argument("--input", "-i", default="", metavar="path",
                  help="noisy input image path")
  ap.add_argument("--albedo", "-a", default="", metavar="path",
                  help="albedo image path")
  ap.add_argument("--normal", "-n", default="", metavar="path",
                  help="normal image path")
  ap.add_argument("--output", "-o", default="", metavar="path",
                  help="denoised output image path")
  ap.add_argument("--threads", type=int, default=0, metavar="num",
                  help="number of threads for color conversion. 0 (default) for all CPUs")
  ap.add_argument("--no-metadata", action='store_true',
                  help="do not copy metadata from the input to the output")
  ap.add_argument("--list", action='store_true',
                  help="list denoisers and their availability")
  ap.add_argument("--debug", action='store_true', help="print debug messages")
  args, unknown_args = ap.parse_known_args()
  return ap, args, unknown_args


def list_denoisers():
  """Prints the registered denoisers."""
  for name, item in DENOISERS.items():
    status = "available" if is_denoiser_available(name) else "not enabled"
    print(f"{name}\t{status}\t{item['description']}")


def main():
  """Executes all operations."""
  ap, args, unknown_args = make_ap_args()
  start_time = time.time()
  if args.debug:
    set_logging_level(logging.DEBUG)
  logger.debug(f"{PROG_NAME}={PROG_VERSION},"
               f" OpenCV={cv2.__version__}, NumPy={np.__version__}")
  if unknown_args:
    logger.debug(f"ignored arguments: {unknown_args}")
  if args.list:
    list_denoisers()
    return
  if not args.use:
    ap.print_help()
    sys.exit(1)
  if not args.input:
    logger.error("input not specified")
    sys.exit(1)
  if not args.output:
    logger.error("output not specified")
    sys.exit(1)
  logger.info(f"Process started: input={args.input}, output={args.output}")
  try:
    run(args.use, args.input, args.output,
        albedo_path=args.albedo or None, normal_path=args.normal or None,
        num_threads=args.threads, keep_metadata=not args.no_metadata)
  except UsageError as e:
    logger.error(str(e))
    sys.exit(1)
  elapsed_time = time.time() - start_time
  logger.info(f"Process done: time={elapsed_time:.2f}s")


if __name__ == "__main__":
  main()


# END OF FILE
