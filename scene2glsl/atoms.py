"""Primitive distance functions ("atoms") referenced by scene trees.

The compiler treats atom names as opaque: it emits ``name(x, args...)`` and
never looks them up.  This module holds the library those calls resolve to,
in two forms:

* numpy implementations, registered in :data:`ATOMS`, used by
  :mod:`scene2glsl.evaluate` to compute distances from generated text;
* the same library as GLSL source (:data:`ATOMS_GLSL`) and the boolean
  helpers (:data:`BINOPS_GLSL`), pasted into fragment shaders by
  :mod:`scene2glsl.shader`.

All numpy functions accept a point array *p* of shape ``(..., 2)``.  Vector
parameters are indexed with ``[..., i]`` so they may be constants or
per-point arrays.

Formulas are adapted from Inigo Quilez's distance function reference:
https://iquilezles.org/articles/distfunctions2d/
"""

from __future__ import annotations

from typing import Callable, Dict

import numpy as np

from ._common import _F, clamp, dot2, length, safe_div, vec2

__all__ = [
    "sdCornerCircle", "boxAtom", "plainBox", "circle", "heart", "moon",
    "star", "triangle", "coolS", "ellipse",
    "ATOMS", "ATOMS_GLSL", "BINOPS_GLSL",
]


# ===========================================================================
# Boxes
# ===========================================================================

def sdCornerCircle(p: _F) -> _F:
    """Canonical rounded-corner arc used by :func:`boxAtom`."""
    return length(p - np.array([0.0, -1.0])) - np.sqrt(2.0)


def boxAtom(p: _F, b: _F, r: _F) -> _F:
    """Box with half-extents *b* and per-corner radii *r* ``(tr, br, tl, bl)``."""
    px = p[..., 0];  py = p[..., 1]
    r  = np.asarray(r, dtype=float)
    # select corner radius by quadrant
    rxy = np.where((px > 0.0)[..., None], r[..., 0:2], r[..., 2:4])
    rx  = np.where(py > 0.0, rxy[..., 0], rxy[..., 1])
    q   = np.abs(p) - b + rx[..., None]
    qx  = q[..., 0];  qy = q[..., 1]
    side = np.maximum(qx, qy) - rx
    # rotate 45 degrees into canonical corner coordinates
    uv = vec2(np.abs(qx - qy), qx + qy - rx) / rx[..., None]
    corner = sdCornerCircle(uv) * rx * np.sqrt(0.5)
    return np.where(np.minimum(qx, qy) < 0.0, side, corner)


def plainBox(p: _F, b: _F) -> _F:
    """Box with half-extents *b* and a hairline corner radius."""
    return boxAtom(p, b, np.full(4, 0.01))


# ===========================================================================
# Curved shapes
# ===========================================================================

def circle(p: _F, r: float) -> _F:
    """Circle of radius *r* centred at origin."""
    return length(p) - r


def heart(p: _F) -> _F:
    """Heart shape (unit-scale)."""
    px = np.abs(p[..., 0]);  py = p[..., 1]
    cond    = px + py > 1.0
    inside  = np.sqrt(dot2(vec2(px - 0.25, py - 0.75))) - np.sqrt(2.0) / 4.0
    s       = 0.5 * np.maximum(px + py, 0.0)
    outside = np.sqrt(np.minimum(
        dot2(vec2(px, py - 1.0)),
        dot2(vec2(px - s, py - s)),
    )) * np.sign(px - py)
    return np.where(cond, inside, outside)


def moon(p: _F, d: float, ra: float, rb: float) -> _F:
    """Crescent moon; *d* offset, *ra* outer radius, *rb* inner radius."""
    px = p[..., 0];  py = np.abs(p[..., 1])
    a  = (ra * ra - rb * rb + d * d) / (2.0 * d)
    b  = np.sqrt(np.maximum(ra * ra - a * a, 0.0))
    c  = d * (px * b - py * a) > d * d * np.maximum(b - py, 0.0)
    return np.where(c,
                    length(vec2(px - a, py - b)),
                    np.maximum(length(vec2(px, py)) - ra, -(length(vec2(px - d, py)) - rb)))


def ellipse(p: _F, ab: _F) -> _F:
    """Ellipse with semi-axes *ab* = ``(a, b)``."""
    ab = np.asarray(ab, dtype=float)
    px = np.abs(p[..., 0]);  py = np.abs(p[..., 1])
    # swap so that px <= py; ab swaps along with p
    swap = px > py
    px_s = np.where(swap, py, px);  py_s = np.where(swap, px, py)
    a    = np.where(swap, ab[..., 1], ab[..., 0]);  b = np.where(swap, ab[..., 0], ab[..., 1])
    l    = b * b - a * a
    m    = a * px_s / l;   m2 = m * m
    n_   = b * py_s / l;   n2 = n_ * n_
    c    = (m2 + n2 - 1.0) / 3.0;   c3 = c * c * c
    q    = c3 + m2 * n2 * 2.0
    d    = c3 + m2 * n2
    g    = m + m * n2
    # d < 0 branch (3 real roots via acos)
    h_n  = np.arccos(np.clip(safe_div(q, c3), -1.0, 1.0)) / 3.0
    s_n  = np.cos(h_n);   t_n = np.sin(h_n) * np.sqrt(3.0)
    rx_n = np.sqrt(np.maximum(-c * (s_n + t_n + 2.0) + m2, 0.0))
    ry_n = np.sqrt(np.maximum(-c * (s_n - t_n + 2.0) + m2, 0.0))
    co_n = (ry_n + np.sign(l) * rx_n + np.abs(g) / np.maximum(rx_n * ry_n, 1e-30) - m) / 2.0
    # d >= 0 branch (1 real root via cube roots)
    h_p  = 2.0 * m * n_ * np.sqrt(np.maximum(d, 0.0))
    s_p  = np.sign(q + h_p) * np.power(np.abs(q + h_p), 1.0 / 3.0)
    u_p  = np.sign(q - h_p) * np.power(np.abs(q - h_p), 1.0 / 3.0)
    rx_p = -s_p - u_p - c * 4.0 + 2.0 * m2
    ry_p = (s_p - u_p) * np.sqrt(3.0)
    rm   = np.sqrt(np.maximum(rx_p * rx_p + ry_p * ry_p, 0.0))
    co_p = (safe_div(ry_p, np.sqrt(np.maximum(rm - rx_p, 0.0))) + 2.0 * g / np.maximum(rm, 1e-30) - m) / 2.0
    co   = np.where(d < 0.0, co_n, co_p)
    r_x  = a * co
    r_y  = b * np.sqrt(np.maximum(1.0 - co * co, 0.0))
    return length(vec2(r_x - px_s, r_y - py_s)) * np.sign(py_s - r_y)


# ===========================================================================
# Polygonal shapes
# ===========================================================================

_K1 = np.array([0.809016994375, -0.587785252292])
_K2 = np.array([-_K1[0], _K1[1]])


def star(p: _F, r: float, rf: float) -> _F:
    """5-pointed star; *r* outer radius, *rf* inner factor (0–1)."""
    px = np.abs(p[..., 0]);  py = p[..., 1]
    # two mirror folds across the star's symmetry axes
    t  = 2.0 * np.maximum(_K1[0] * px + _K1[1] * py, 0.0)
    px = px - t * _K1[0];  py = py - t * _K1[1]
    t  = 2.0 * np.maximum(_K2[0] * px + _K2[1] * py, 0.0)
    px = px - t * _K2[0];  py = py - t * _K2[1]
    px = np.abs(px)
    py = py - r
    bax = rf * -_K1[1]
    bay = rf * _K1[0] - 1.0
    h   = clamp((px * bax + py * bay) / (bax * bax + bay * bay), 0.0, r)
    return length(vec2(px - bax * h, py - bay * h)) * np.sign(py * bax - px * bay)


def triangle(p: _F, r: float) -> _F:
    """Equilateral triangle with half side length *r*."""
    k  = np.sqrt(3.0)
    px = np.abs(p[..., 0]) - r
    py = p[..., 1] + r / k
    cond   = px + k * py > 0.0
    new_px = np.where(cond, (px - k * py) / 2.0, px)
    new_py = np.where(cond, (-k * px - py) / 2.0, py)
    new_px = new_px - clamp(new_px, -2.0 * r, 0.0)
    return -length(vec2(new_px, new_py)) * np.sign(new_py)


def coolS(p: _F) -> _F:
    """The "cool S" doodle."""
    six = np.where(p[..., 1] < 0.0, -p[..., 0], p[..., 0])
    px  = np.abs(p[..., 0])
    py  = np.abs(p[..., 1]) - 0.2
    # px/0.4 is non-negative, so floor(x + 0.5) is GLSL round()
    rex = px - np.minimum(np.floor(px / 0.4 + 0.5), 0.4)
    aby = np.abs(py - 0.2) - 0.6

    d = dot2(vec2(six, -py) - clamp(0.5 * (six - py), 0.0, 0.2)[..., None])
    d = np.minimum(d, dot2(vec2(px, -aby) - clamp(0.5 * (px - aby), 0.0, 0.4)[..., None]))
    d = np.minimum(d, dot2(vec2(rex, py - clamp(py, 0.0, 0.4))))

    s = 2.0 * px + aby + np.abs(aby + 0.4) - 0.4
    return np.sqrt(d) * np.sign(s)


# ===========================================================================
# Registry
# ===========================================================================

ATOMS: Dict[str, Callable[..., _F]] = {
    "sdCornerCircle": sdCornerCircle,
    "boxAtom": boxAtom,
    "plainBox": plainBox,
    "circle": circle,
    "heart": heart,
    "moon": moon,
    "star": star,
    "triangle": triangle,
    "coolS": coolS,
    "ellipse": ellipse,
}


# ===========================================================================
# GLSL sources
# ===========================================================================

BINOPS_GLSL = """\
float unite( float d1, float d2 ) {
  return min(d1, d2);
}

float subtraction( float d1, float d2 ) {
  return max(-d1, d2);
}

float intersection( float d1, float d2 ) {
  return max(d1, d2);
}

float smoothUnion( float d1, float d2, float k ) {
  float h = max(k-abs(d1-d2),0.0);
  return min(d1, d2) - h*h*0.25/k;
}

float smoothSubtraction( float d1, float d2, float k ) {
  return -smoothUnion(d1, -d2, k);
}

float smoothIntersection( float d1, float d2, float k ) {
  return -smoothUnion(-d1, -d2, k);
}
"""

ATOMS_GLSL = """\
float dot2(in vec2 v) {
  return dot(v, v);
}

float sdCornerCircle(in vec2 p) {
  return length(p - vec2(0.0, -1.0)) - sqrt(2.0);
}

float boxAtom(in vec2 p, in vec2 b, in vec4 r) {
  r.xy = (p.x > 0.0) ? r.xy : r.zw;
  r.x  = (p.y > 0.0) ? r.x  : r.y;
  vec2 q = abs(p) - b + r.x;
  if(min(q.x, q.y) < 0.0) return max(q.x, q.y) - r.x;
  vec2 uv = vec2(abs(q.x - q.y), q.x + q.y - r.x )/r.x;
  float d = sdCornerCircle(uv);
  return d * r.x * sqrt(0.5);
}

float plainBox(in vec2 p, in vec2 b) {
  return boxAtom(p, b, vec4(0.01, 0.01, 0.01, 0.01));
}

float circle( vec2 p, float r ) {
  return length(p) - r;
}

float heart( in vec2 p ) {
  p.x = abs(p.x);
  if( p.y+p.x>1.0 )
    return sqrt(dot2(p-vec2(0.25,0.75))) - sqrt(2.0)/4.0;
  return sqrt(min(dot2(p-vec2(0.00,1.00)),
                  dot2(p-0.5*max(p.x+p.y,0.0)))) * sign(p.x-p.y);
}

float moon(vec2 p, float d, float ra, float rb) {
  p.y = abs(p.y);
  float a = (ra*ra - rb*rb + d*d)/(2.0*d);
  float b = sqrt(max(ra*ra-a*a,0.0));
  if( d*(p.x*b-p.y*a) > d*d*max(b-p.y,0.0) )
    return length(p-vec2(a,b));
  return max( (length(p          )-ra),
             -(length(p-vec2(d,0))-rb));
}

float star(in vec2 p, in float r, in float rf) {
  const vec2 k1 = vec2(0.809016994375, -0.587785252292);
  const vec2 k2 = vec2(-k1.x,k1.y);
  p.x = abs(p.x);
  p -= 2.0*max(dot(k1,p),0.0)*k1;
  p -= 2.0*max(dot(k2,p),0.0)*k2;
  p.x = abs(p.x);
  p.y -= r;
  vec2 ba = rf*vec2(-k1.y,k1.x) - vec2(0,1);
  float h = clamp( dot(p,ba)/dot(ba,ba), 0.0, r );
  return length(p-ba*h) * sign(p.y*ba.x-p.x*ba.y);
}

float triangle( in vec2 p, in float r ) {
  const float k = sqrt(3.0);
  p.x = abs(p.x) - r;
  p.y = p.y + r/k;
  if( p.x+k*p.y>0.0 ) p = vec2(p.x-k*p.y,-k*p.x-p.y)/2.0;
  p.x -= clamp( p.x, -2.0*r, 0.0 );
  return -length(p)*sign(p.y);
}

float coolS(in vec2 p) {
  float six = (p.y < 0.0) ? -p.x : p.x;
  p.x = abs(p.x);
  p.y = abs(p.y) - 0.2;
  float rex = p.x - min(round(p.x/0.4),0.4);
  float aby = abs(p.y - 0.2) - 0.6;
  float d = dot2(vec2(six,-p.y)-clamp(0.5*(six-p.y),0.0,0.2));
  d = min(d,dot2(vec2(p.x,-aby)-clamp(0.5*(p.x-aby),0.0,0.4)));
  d = min(d,dot2(vec2(rex,p.y  -clamp(p.y          ,0.0,0.4))));
  float s = 2.0*p.x + aby + abs(aby+0.4) - 0.4;
  return sqrt(d) * sign(s);
}

float ellipse(in vec2 p, in vec2 ab) {
  p = abs(p); if( p.x > p.y ) {p=p.yx;ab=ab.yx;}
  float l = ab.y*ab.y - ab.x*ab.x;
  float m = ab.x*p.x/l;      float m2 = m*m;
  float n = ab.y*p.y/l;      float n2 = n*n;
  float c = (m2+n2-1.0)/3.0; float c3 = c*c*c;
  float q = c3 + m2*n2*2.0;
  float d = c3 + m2*n2;
  float g = m + m*n2;
  float co;
  if( d<0.0 ) {
    float h = acos(q/c3)/3.0;
    float s = cos(h);
    float t = sin(h)*sqrt(3.0);
    float rx = sqrt( -c*(s + t + 2.0) + m2 );
    float ry = sqrt( -c*(s - t + 2.0) + m2 );
    co = (ry+sign(l)*rx+abs(g)/(rx*ry)- m)/2.0;
  } else {
    float h = 2.0*m*n*sqrt( d );
    float s = sign(q+h)*pow(abs(q+h), 1.0/3.0);
    float u = sign(q-h)*pow(abs(q-h), 1.0/3.0);
    float rx = -s - u - c*4.0 + 2.0*m2;
    float ry = (s - u)*sqrt(3.0);
    float rm = sqrt( rx*rx + ry*ry );
    co = (ry/sqrt(rm-rx)+2.0*g/rm-m)/2.0;
  }
  vec2 r = ab * vec2(co, sqrt(1.0-co*co));
  return length(r-p) * sign(p.y-r.y);
}
"""
