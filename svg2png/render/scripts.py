"""JavaScript functions evaluated inside the loaded SVG document.

Errors cannot cross the page boundary as exceptions, so each function catches
its own failures and returns ``{error: message}`` instead.
"""

GET_INTRINSIC_SIZE = """
() => {
    try {
        const el = document.documentElement;
        const isPercent = (value) => /%\\s*$/.test(value || "");
        const rawWidth = el.getAttribute("width");
        const rawHeight = el.getAttribute("height");
        const width = !isPercent(rawWidth) && parseFloat(rawWidth);
        const height = !isPercent(rawHeight) && parseFloat(rawHeight);

        if (width && height) {
            return {width: width, height: height};
        }

        const viewBox = el.viewBox && el.viewBox.baseVal;
        const viewBoxWidth = viewBox ? viewBox.width : 0;
        const viewBoxHeight = viewBox ? viewBox.height : 0;

        if (width && viewBoxWidth && viewBoxHeight) {
            return {width: width, height: width * viewBoxHeight / viewBoxWidth};
        }
        if (height && viewBoxWidth && viewBoxHeight) {
            return {width: height * viewBoxWidth / viewBoxHeight, height: height};
        }
        return null;
    } catch (error) {
        return {error: String(error)};
    }
}
"""

SET_SIZE = """
(sizes) => {
    try {
        const width = sizes && sizes.width;
        const height = sizes && sizes.height;
        if (!width && !height) {
            return sizes;
        }
        const el = document.documentElement;
        if (width) {
            el.setAttribute("width", width + "px");
        } else {
            el.removeAttribute("width");
        }
        if (height) {
            el.setAttribute("height", height + "px");
        } else {
            el.removeAttribute("height");
        }
        return sizes;
    } catch (error) {
        return {error: String(error)};
    }
}
"""

HAS_PARSE_ERROR = """
() => document.getElementsByTagName("parsererror").length > 0
"""

__all__ = ["GET_INTRINSIC_SIZE", "HAS_PARSE_ERROR", "SET_SIZE"]
